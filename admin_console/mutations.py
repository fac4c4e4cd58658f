"""
Mutation controller: create, update, delete and status changes for one admin
screen, with the local list patched in place instead of refetched.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import rules

from .client import ResourceClient, ResourceError, ValidationError
from .listing import ListController
from .notices import NoticeBoard
from .resources import COUPONS, CouponForm, Entity
from .state import ItemCreated, ItemMerged, ItemRemoved, ItemReplaced

logger = logging.getLogger(__name__)

Payload = Union[CouponForm, Dict[str, Any]]


@dataclass
class ModalState:
    create_open: bool = False
    edit_open: bool = False
    delete_open: bool = False
    editing_id: Optional[str] = None
    deleting_id: Optional[str] = None
    status_open: bool = False
    status_id: Optional[str] = None
    form: Optional[Payload] = None


@dataclass
class InFlight:
    creating: bool = False
    updating: bool = False
    deleting: bool = False
    changing_status: bool = False


class MutationController:
    """Runs mutations against the resource endpoint for one screen.

    Every operation returns True on success and False otherwise; failures end
    up on the notice board, never as exceptions. Each kind of mutation has its
    own in-flight flag, cleared whatever the outcome.
    """

    def __init__(self, client: ResourceClient, listing: ListController, notices: Optional[NoticeBoard] = None):
        self.client = client
        self.resource = client.resource
        self.listing = listing
        self.notices = notices if notices is not None else listing.notices
        self.modal = ModalState()
        self.in_flight = InFlight()
        self.detail: Optional[Entity] = None
        self.closed = False

    # Modals

    def open_create(self) -> Payload:
        form = CouponForm() if self.resource is COUPONS else {}
        self.modal.create_open, self.modal.form = True, form
        return form

    def open_edit(self, entity: Entity) -> Payload:
        form = CouponForm.from_entity(entity) if self.resource is COUPONS else dict(entity)
        self.modal.edit_open = True
        self.modal.editing_id = self.resource.identity(entity)
        self.modal.form = form
        return form

    def open_delete(self, entity_id: str) -> None:
        self.modal.delete_open, self.modal.deleting_id = True, entity_id

    def open_status(self, entity_id: str) -> None:
        self.modal.status_open, self.modal.status_id = True, entity_id

    def open_detail(self, entity: Optional[Entity]) -> None:
        self.detail = entity

    def close_create(self) -> None:
        self.modal.create_open, self.modal.form = False, None

    def close_edit(self) -> None:
        self.modal.edit_open, self.modal.editing_id, self.modal.form = False, None, None

    def close_delete(self) -> None:
        self.modal.delete_open, self.modal.deleting_id = False, None

    def close_status(self) -> None:
        self.modal.status_open, self.modal.status_id = False, None

    # Helpers

    def _validated(self, data: Payload) -> Dict[str, Any]:
        payload = data.to_payload() if isinstance(data, CouponForm) else dict(data)
        try:
            self.resource.validate(payload)
        except rules.RuleViolation as exc:
            raise ValidationError(exc.message) from exc
        return payload

    def _failed(self, exc: ResourceError) -> bool:
        if not self.closed:
            self.notices.error(exc.message)
        return False

    def _succeeded(self, message: str) -> bool:
        self.notices.success(message)
        return True

    def _ignored(self, action: str, entity_id: Optional[str] = None) -> bool:
        logger.info(f"Screen closed, ignoring {action} result for {self.resource.label} {entity_id or ''}".rstrip())
        return False

    def _merge(self, entity_id: str, changes: Dict[str, Any]) -> None:
        self.listing.dispatch(ItemMerged(entity_id, changes))
        if self.resource.identity(self.detail) == entity_id:
            self.detail = {**self.detail, **changes}

    # Operations

    async def create(self, data: Payload) -> bool:
        self.in_flight.creating = True
        try:
            entity = await self.client.create(self._validated(data))
        except ResourceError as exc:
            return self._failed(exc)
        finally:
            self.in_flight.creating = False

        if self.closed:
            return self._ignored("create")
        self.listing.dispatch(ItemCreated(entity))
        self.close_create()
        return self._succeeded(f"{self.resource.label.capitalize()} created successfully.")

    async def update(self, entity_id: str, data: Payload) -> bool:
        self.in_flight.updating = True
        try:
            payload = self._validated(data)
            entity = await self.client.update(entity_id, payload)
        except ResourceError as exc:
            return self._failed(exc)
        finally:
            self.in_flight.updating = False

        if self.closed:
            return self._ignored("update", entity_id)
        if entity is not None:
            self.listing.dispatch(ItemReplaced(entity_id, entity))
            if self.resource.identity(self.detail) == entity_id:
                self.detail = entity
        else:
            self._merge(entity_id, payload)
        self.close_edit()
        return self._succeeded(f"{self.resource.label.capitalize()} updated successfully.")

    async def remove(self, entity_id: str) -> bool:
        self.in_flight.deleting = True
        try:
            await self.client.remove(entity_id)
        except ResourceError as exc:
            return self._failed(exc)
        finally:
            self.in_flight.deleting = False

        if self.closed:
            return self._ignored("delete", entity_id)
        self.listing.dispatch(ItemRemoved(entity_id))
        if self.resource.identity(self.detail) == entity_id:
            self.detail = None
        self.close_delete()
        return self._succeeded(f"{self.resource.label.capitalize()} deleted successfully.")

    async def _change(self, entity_id: str, send, optimistic: Dict[str, Any], message: str) -> bool:
        """Send a single-field change and merge the result into list and detail.

        The server's copy wins; fields it leaves out keep the requested value.
        """
        self.in_flight.changing_status = True
        try:
            entity = await send()
        except ResourceError as exc:
            return self._failed(exc)
        finally:
            self.in_flight.changing_status = False

        if self.closed:
            return self._ignored("change", entity_id)
        changes = dict(optimistic)
        if entity:
            changes.update({k: v for k, v in entity.items() if v is not None})
        self._merge(entity_id, changes)
        if self.modal.status_id == entity_id:
            self.close_status()
        return self._succeeded(message)

    async def set_status(self, entity_id: str, new_status: str) -> bool:
        current = self.listing.state.find(entity_id) or (
            self.detail if self.resource.identity(self.detail) == entity_id else None
        )
        try:
            self.resource.check_transition((current or {}).get("status"), new_status)
        except rules.RuleViolation as exc:
            return self._failed(ValidationError(exc.message))

        payload = {"status": new_status}
        return await self._change(
            entity_id, lambda: self.client.patch_status(entity_id, payload), payload,
            f"{self.resource.label.capitalize()} status updated successfully!",
        )

    async def set_active(self, entity_id: str, active: bool) -> bool:
        payload = {"isActive": bool(active)}
        return await self._change(
            entity_id, lambda: self.client.patch_status(entity_id, payload), payload,
            f"{self.resource.label.capitalize()} {'activated' if active else 'deactivated'} successfully",
        )

    async def set_admin(self, entity_id: str, admin: bool) -> bool:
        payload = {"isAdmin": 1 if admin else 0}
        return await self._change(
            entity_id,
            lambda: self.client.update(entity_id, payload, failure="Failed to update admin status"),
            payload,
            f"{self.resource.label.capitalize()} is now {'an admin' if admin else 'a regular user'}",
        )

    def close(self) -> None:
        """Ignore the results of any mutation still in flight."""
        self.closed = True
        self.close_create()
        self.close_edit()
        self.close_delete()
        self.close_status()
