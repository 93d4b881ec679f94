"""Built-in page sets.

The engine never imports these; the host registry is the only consumer.
"""

from pages_workflow.page_sets.demo import DEMO_WORKFLOW_ID, build_demo_pages
from pages_workflow.page_sets.seller_onboarding import (
    SELLER_ONBOARDING_WORKFLOW_ID,
    SellerOnboardingContext,
    build_seller_onboarding_pages,
    seller_onboarding_provider,
)

__all__ = [
    "DEMO_WORKFLOW_ID",
    "SELLER_ONBOARDING_WORKFLOW_ID",
    "SellerOnboardingContext",
    "build_demo_pages",
    "build_seller_onboarding_pages",
    "seller_onboarding_provider",
]
