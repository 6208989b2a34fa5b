import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bizcards.core.config import settings
from bizcards.core.errors import (
    ActionResult,
    BucketNotFoundError,
    ErrorKind,
    FieldError,
    PhotoValidationError,
    StorageError,
    UNAUTHORIZED_COMPANY,
    UNAUTHORIZED_EMPLOYEE,
)
from bizcards.core.logging_config import logger, log_diagnostic
from bizcards.core.tenant_context import ThemeScoped, caller_owns, resolve_card_scope
from bizcards.crud.employee_card import employee_card as employee_card_crud, is_missing_column_error
from bizcards.i18n import translate
from bizcards.models.employee_card import EmployeeCard
from bizcards.models.user import User
from bizcards.schemas.employee import EmployeeCardResponse, EmployeeCreate, EmployeeUpdate
from bizcards.services.storage import StorageClient, storage_client
from bizcards.utils.file_validation import (
    extension_for_mime,
    validate_file_content,
    validate_file_upload,
)
from bizcards.utils.slug import generate_slug, generate_unique_slug

# Insert attempts when a concurrent creation takes the checked slug
SLUG_INSERT_ATTEMPTS = 3


@dataclass
class PhotoUpload:
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


def card_to_response(card: EmployeeCard, include_company_column: bool = True) -> EmployeeCardResponse:
    """
    Serialize a card, lifting display fields out of the theme.

    Args:
        card: EmployeeCard instance
        include_company_column: False for rows loaded without the
            company_id column; the company then comes from the theme
    """
    theme = card.theme or {}
    company_id = card.company_id if include_company_column else None
    return EmployeeCardResponse(
        id=card.id,
        employee_id=card.employee_id,
        public_slug=card.public_slug,
        photo_url=card.photo_url,
        contact_links=card.contact_links or {},
        social_links=card.social_links or {},
        business_hours=card.business_hours,
        theme=theme,
        is_active=card.is_active,
        company_id=company_id or theme.get("company_id"),
        created_at=card.created_at,
        updated_at=card.updated_at,
        name=theme.get("name"),
        title=theme.get("title"),
        title_translations=theme.get("title_translations"),
    )


def _photo_failure(exc: PhotoValidationError) -> ActionResult:
    return ActionResult.fail(
        str(exc),
        ErrorKind.validation,
        field_errors=[FieldError(field="photo", code=exc.code, message=str(exc))],
        code=exc.code,
    )


class EmployeeService:
    """
    Card provisioning pipeline.

    Every operation takes the caller's session company id and returns an
    ActionResult; authorization mismatches are failures, not exceptions.
    """

    def __init__(self, storage: Optional[StorageClient] = None):
        self.crud = employee_card_crud
        self.storage = storage or storage_client

    def _check_photo(self, photo: PhotoUpload) -> None:
        """
        Raises:
            PhotoValidationError: If the file is rejected
        """
        error = validate_file_upload(photo.filename, photo.content_type, len(photo.data))
        if error:
            raise PhotoValidationError(error, translate(error))
        if not validate_file_content(photo.data, photo.content_type):
            raise PhotoValidationError("invalid_file_content", translate("invalid_file_content"))

    def _upload_photo(self, employee_id: str, photo: PhotoUpload) -> str:
        """
        Validate and store a profile photo.

        Returns:
            Public URL of the stored object

        Raises:
            PhotoValidationError: If the file is rejected
            StorageError: If the upload fails
        """
        self._check_photo(photo)

        # Extension from the validated MIME type, never from the filename
        extension = extension_for_mime(photo.content_type)
        path = f"{employee_id}/{int(time.time() * 1000)}.{extension}"
        self.storage.upload(settings.STORAGE_BUCKET, path, photo.data, photo.content_type)
        return self.storage.public_url(settings.STORAGE_BUCKET, path)

    def _storage_failure(self, exc: StorageError) -> ActionResult:
        if isinstance(exc, BucketNotFoundError):
            return ActionResult.fail(str(exc), ErrorKind.upstream)
        return ActionResult.fail(f"Failed to upload photo: {exc}", ErrorKind.upstream)

    def _attach_new_photo(self, db: Session, card: EmployeeCard, photo: PhotoUpload) -> Optional[ActionResult]:
        """
        Store the photo of a freshly inserted card.

        A failed upload removes the card again so creation stays all or
        nothing. Returns a failure, or None once ``card.photo_url`` is saved.
        """
        try:
            photo_url = self._upload_photo(card.employee_id, photo)
        except StorageError as e:
            log_diagnostic("Photo upload failed", employee_id=card.employee_id, error=str(e))
            try:
                self.crud.delete(db, card)
            except SQLAlchemyError as delete_error:
                db.rollback()
                logger.error(f"Could not remove card {card.public_slug} after failed upload: {delete_error}")
            return self._storage_failure(e)

        card.photo_url = photo_url
        try:
            self.crud.save(db, card)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Stored photo {photo_url} is orphaned, card update failed: {e}")
            return ActionResult.fail(f"Failed to create employee card: {e}", ErrorKind.upstream)
        return None

    def create_employee(
        self,
        db: Session,
        company_id: str,
        data: EmployeeCreate,
        caller_company_id: Optional[str],
        photo: Optional[PhotoUpload] = None
    ) -> ActionResult:
        """
        Create an employee card for a company.

        Args:
            db: Database session
            company_id: Target company
            data: Validated employee form data
            caller_company_id: Company of the session user
            photo: Optional uploaded profile photo

        Returns:
            ActionResult with the created card
        """
        if not caller_company_id or str(caller_company_id) != str(company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        employee_id = str(uuid.uuid4())
        base_slug = generate_slug(f"{data.first_name} {data.last_name}")

        # Validate now, store only once the card row exists
        if photo is not None:
            try:
                self._check_photo(photo)
            except PhotoValidationError as e:
                return _photo_failure(e)
        photo_url = data.photo_url or settings.DEFAULT_PROFILE_PICTURE_URL

        theme: Dict[str, Any] = {
            "name": f"{data.first_name} {data.last_name}",
            "title": data.title,
            "company_id": company_id,
        }
        if data.title_translations:
            theme["title_translations"] = data.title_translations

        values = {
            "employee_id": employee_id,
            "photo_url": photo_url,
            "contact_links": data.contact_links.model_dump(exclude_none=True),
            "social_links": (
                data.social_links.model_dump(exclude_none=True) if data.social_links else {"linkedin": ""}
            ),
            "business_hours": data.business_hours.model_dump(exclude_none=True) if data.business_hours else None,
            "theme": theme,
            "is_active": data.is_active,
            "company_id": company_id,
        }

        def slug_taken(candidate: str) -> bool:
            return self.crud.slug_exists(db, candidate)

        card = None
        for attempt in range(SLUG_INSERT_ATTEMPTS):
            values["public_slug"] = generate_unique_slug(base_slug, slug_taken, randomize=attempt > 0)
            try:
                card = self.crud.create(db, values=values)
                break
            except IntegrityError as e:
                if "public_slug" not in str(e):
                    log_diagnostic("Employee card insert failed", employee_id=employee_id, error=str(e.orig))
                    return ActionResult.fail(f"Failed to create employee card: {e.orig}", ErrorKind.conflict)
                logger.info(f"Slug {values['public_slug']} taken at insert time, retrying")
            except SQLAlchemyError as e:
                log_diagnostic("Employee card insert failed", employee_id=employee_id, error=str(e))
                return ActionResult.fail(f"Failed to create employee card: {e}", ErrorKind.upstream)

        if card is None:
            return ActionResult.fail(
                "Failed to create employee card: could not allocate a unique public URL",
                ErrorKind.conflict,
            )

        if photo is not None:
            failure = self._attach_new_photo(db, card, photo)
            if failure is not None:
                return failure

        logger.info(f"Created employee card {card.public_slug} for company {company_id}")
        return ActionResult.ok(card_to_response(card))

    def _get_owned_card(
        self,
        db: Session,
        employee_id: str,
        caller_company_id: Optional[str]
    ) -> EmployeeCard | ActionResult:
        card = self.crud.get_by_employee_id(db, employee_id)
        if card is None:
            return ActionResult.fail(f"Employee not found: {employee_id}", ErrorKind.not_found)

        if not caller_owns(resolve_card_scope(card), caller_company_id):
            log_diagnostic("Employee access denied", employee_id=employee_id, caller_company_id=caller_company_id)
            return ActionResult.fail(UNAUTHORIZED_EMPLOYEE, ErrorKind.unauthorized)
        return card

    def update_employee(
        self,
        db: Session,
        employee_id: str,
        data: EmployeeUpdate,
        caller_company_id: Optional[str],
        photo: Optional[PhotoUpload] = None
    ) -> ActionResult:
        """
        Apply a partial update; fields absent from the payload keep their values.

        Returns:
            ActionResult with the updated card
        """
        card = self._get_owned_card(db, employee_id, caller_company_id)
        if isinstance(card, ActionResult):
            return card

        scope = resolve_card_scope(card)
        supplied = data.model_fields_set
        theme = dict(card.theme or {})

        # Name only changes as a whole
        if data.first_name and data.last_name:
            theme["name"] = f"{data.first_name} {data.last_name}"
        if data.title and data.title.strip():
            theme["title"] = data.title.strip()
        if data.title_translations is not None:
            if data.title_translations:
                theme["title_translations"] = data.title_translations
            else:
                theme.pop("title_translations", None)

        if isinstance(scope, ThemeScoped):
            # Legacy row: promote the theme company to the column
            card.company_id = scope.company_id
        theme["company_id"] = scope.company_id

        if data.contact_links is not None:
            card.contact_links = data.contact_links.model_dump(exclude_none=True)
        if data.social_links is not None:
            card.social_links = data.social_links.model_dump(exclude_none=True)
        if "business_hours" in supplied:
            card.business_hours = data.business_hours.model_dump(exclude_none=True) if data.business_hours else None
        if data.is_active is not None:
            card.is_active = data.is_active

        try:
            if photo is not None:
                card.photo_url = self._upload_photo(card.employee_id, photo)
            elif "photo_url" in supplied:
                card.photo_url = data.photo_url or settings.DEFAULT_PROFILE_PICTURE_URL
        except PhotoValidationError as e:
            db.rollback()
            return _photo_failure(e)
        except StorageError as e:
            db.rollback()
            log_diagnostic("Photo upload failed", employee_id=employee_id, error=str(e))
            return self._storage_failure(e)

        card.theme = theme

        try:
            card = self.crud.save(db, card)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Employee card update failed", employee_id=employee_id, error=str(e))
            return ActionResult.fail(f"Failed to update employee card: {e}", ErrorKind.upstream)

        logger.info(f"Updated employee card {card.public_slug}")
        return ActionResult.ok(card_to_response(card))

    def delete_employee(
        self,
        db: Session,
        employee_id: str,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        """
        Hard-delete a card.

        Only reachable after password reverification; see
        ``bizcards.services.auth.verify_password_for_user``.
        """
        card = self._get_owned_card(db, employee_id, caller_company_id)
        if isinstance(card, ActionResult):
            return card

        slug = card.public_slug
        try:
            self.crud.delete(db, card)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Employee card delete failed", employee_id=employee_id, error=str(e))
            return ActionResult.fail(f"Failed to delete employee card: {e}", ErrorKind.upstream)

        logger.info(f"Deleted employee card {slug}")
        return ActionResult.ok({"employee_id": employee_id})

    def toggle_employee_status(
        self,
        db: Session,
        employee_id: str,
        is_active: bool,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        card = self._get_owned_card(db, employee_id, caller_company_id)
        if isinstance(card, ActionResult):
            return card

        card.is_active = is_active
        card.updated_at = datetime.now(timezone.utc)
        try:
            card = self.crud.save(db, card)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Employee status update failed", employee_id=employee_id, error=str(e))
            return ActionResult.fail(f"Failed to update employee status: {e}", ErrorKind.upstream)

        return ActionResult.ok(card_to_response(card))

    def get_employees_by_company(
        self,
        db: Session,
        company_id: str,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        """
        List a company's cards, newest first.

        Queries the company_id column; when the column has not been
        migrated yet, falls back to filtering every card by its theme.
        """
        if not caller_company_id or str(caller_company_id) != str(company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        try:
            cards = self.crud.get_multi_by_company_column(db, company_id)
            return ActionResult.ok([card_to_response(card) for card in cards])
        except SQLAlchemyError as e:
            db.rollback()
            if not is_missing_column_error(e):
                log_diagnostic("Employee listing failed", company_id=company_id, error=str(e))
                return ActionResult.fail(f"Failed to list employees: {e}", ErrorKind.upstream)
            logger.warning("employee_cards.company_id not available, filtering cards by theme")

        try:
            legacy_cards = self.crud.get_all_legacy(db)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Legacy employee listing failed", company_id=company_id, error=str(e))
            return ActionResult.fail(f"Failed to list employees: {e}", ErrorKind.upstream)

        cards = [card for card in legacy_cards if (card.theme or {}).get("company_id") == company_id]
        return ActionResult.ok([card_to_response(card, include_company_column=False) for card in cards])

    def get_card_for_employee(self, db: Session, user: User) -> Optional[EmployeeCardResponse]:
        """Card owned by the signed-in employee, if one was provisioned."""
        card = self.crud.get_by_employee_id(db, user.id)
        if card is None:
            return None
        return card_to_response(card)


# Create singleton instance
employee_service = EmployeeService()
