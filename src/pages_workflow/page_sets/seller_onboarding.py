"""Seller onboarding workflow.

The pages only describe what they show. Account lookups, agreement acceptance
and the registration request itself belong to the seller services; the
context object is the seam where those services hand their data to the pages.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from pages_workflow.config import WorkflowSettings
from pages_workflow.workflow.events import WorkflowSignal
from pages_workflow.workflow.pages import PageView, WorkflowPageDefinition, WorkflowPageProps

logger = logging.getLogger(__name__)

SELLER_ONBOARDING_WORKFLOW_ID = "seller-onboarding"


@dataclass(slots=True)
class SellerOnboardingContext:
    """State shared by every page of one onboarding run."""

    email: str | None = None
    agreements_accepted: bool = False
    request_status: str | None = None

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())


@asynccontextmanager
async def seller_onboarding_provider(
    settings: WorkflowSettings,
) -> AsyncIterator[SellerOnboardingContext]:
    context = SellerOnboardingContext()
    logger.debug("Seller onboarding context opened")
    try:
        yield context
    finally:
        logger.debug(
            "Seller onboarding context closed",
            extra={"agreements_accepted": context.agreements_accepted},
        )


def _intro(props: WorkflowPageProps) -> PageView:
    return PageView(
        page_id="seller-intro",
        title="Become a seller",
        description="List your shop, publish offers and accept orders.",
        is_initializing=props.is_initializing,
    )


def _agreements(context: SellerOnboardingContext) -> Callable[[WorkflowPageProps], PageView]:
    def render(props: WorkflowPageProps) -> PageView:
        status = "accepted" if context.agreements_accepted else "not accepted yet"
        return PageView(
            page_id="seller-agreements",
            title="Seller agreements",
            description=f"Review and accept the seller terms ({status}).",
            is_initializing=props.is_initializing,
        )

    return render


def _data(context: SellerOnboardingContext) -> Callable[[WorkflowPageProps], PageView]:
    def render(props: WorkflowPageProps) -> PageView:
        contact = context.email if context.has_email else "no email bound"
        return PageView(
            page_id="seller-data",
            title="Shop details",
            description=f"Fill in the registration request. Contact: {contact}.",
            is_initializing=props.is_initializing,
        )

    return render


def _success(context: SellerOnboardingContext) -> Callable[[WorkflowPageProps], PageView]:
    def render(props: WorkflowPageProps) -> PageView:
        status = context.request_status or "submitted"
        return PageView(
            page_id="seller-success",
            title="Request sent",
            description=f"Your registration request is {status}.",
            can_go_back=False,
            is_initializing=props.is_initializing,
            actions=[WorkflowSignal.NEXT],
        )

    return render


def build_seller_onboarding_pages(
    settings: WorkflowSettings, context: SellerOnboardingContext | None = None
) -> list[WorkflowPageDefinition]:
    context = context if context is not None else SellerOnboardingContext()
    return [
        WorkflowPageDefinition(id="seller-intro", render=_intro),
        WorkflowPageDefinition(id="seller-agreements", render=_agreements(context)),
        WorkflowPageDefinition(id="seller-data", render=_data(context)),
        WorkflowPageDefinition(id="seller-success", render=_success(context)),
    ]
