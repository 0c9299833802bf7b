"""Test template endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from assessment_api.dependencies import get_purchase_provider, get_state_adapter
from assessment_api.errors import TemplateNotFoundError
from assessment_api.models import TemplateDraft, TemplateOwnerRequest, TestTemplate
from assessment_api.services import template_service
from assessment_api.services.providers import PurchaseProvider
from assessment_api.storage import AssessmentsStateAdapter
from assessment_api.utils import validate_id

router = APIRouter(prefix="/api/templates", tags=["templates"])

StateDep = Annotated[AssessmentsStateAdapter, Depends(get_state_adapter)]


@router.get("")
async def list_templates(
    store: StateDep,
    teacher_id: Annotated[str, Query(alias="teacherId")],
) -> list[TestTemplate]:
    """List a teacher's templates, most recently updated first."""
    teacher_id = validate_id("teacherId", teacher_id)
    return await template_service.get_templates_by_teacher(store, teacher_id)


@router.post("")
async def save_template(payload: TemplateDraft, store: StateDep) -> TestTemplate:
    """Create or update a template."""
    return await template_service.save_template(store, payload)


@router.get("/{template_id}")
async def get_template(template_id: str, store: StateDep) -> TestTemplate:
    template = await template_service.get_template_by_id(store, template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template


@router.post("/{template_id}/publish")
async def publish_template(
    template_id: str, payload: TemplateOwnerRequest, store: StateDep
) -> TestTemplate:
    return await template_service.publish_template(store, template_id, payload.teacherId)


@router.post("/{template_id}/duplicate")
async def duplicate_template(
    template_id: str, payload: TemplateOwnerRequest, store: StateDep
) -> TestTemplate:
    """Copy a template into the caller's library."""
    return await template_service.duplicate_template(store, template_id, payload.teacherId)


@router.post("/{template_id}/hide")
async def hide_template(
    template_id: str, payload: TemplateOwnerRequest, store: StateDep
) -> TestTemplate:
    """Remove a template from the library without the purchase check."""
    return await template_service.hide_template(store, template_id, payload.teacherId)


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    store: StateDep,
    purchases: Annotated[PurchaseProvider, Depends(get_purchase_provider)],
    teacher_id: Annotated[str, Query(alias="teacherId")],
) -> TestTemplate:
    """Soft-delete a template not used by purchased courses."""
    teacher_id = validate_id("teacherId", teacher_id)
    return await template_service.delete_template(store, purchases, template_id, teacher_id)
