"""
Tests for the employee card provisioning pipeline.
"""

import httpx
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, OperationalError

from bizcards.core.errors import ErrorKind, UNAUTHORIZED_COMPANY, UNAUTHORIZED_EMPLOYEE
from bizcards.crud.employee_card import employee_card as employee_card_crud, is_missing_column_error
from bizcards.models.employee_card import EmployeeCard
from bizcards.schemas.employee import EmployeeCreate, EmployeeUpdate
from bizcards.services.employee import PhotoUpload, employee_service
from bizcards.services.storage import StorageClient

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


def missing_column_error():
    return OperationalError(
        "SELECT * FROM employee_cards WHERE employee_cards.company_id = ?",
        {},
        Exception("no such column: employee_cards.company_id"),
    )


def rebuild_without_company_column(db):
    """Recreate employee_cards as it was before the company_id migration."""
    columns = (
        "id, employee_id, public_slug, photo_url, contact_links, social_links, "
        "business_hours, theme, is_active, created_at, updated_at"
    )
    db.execute(text(f"CREATE TABLE employee_cards_legacy AS SELECT {columns} FROM employee_cards"))
    db.execute(text("DROP TABLE employee_cards"))
    db.execute(text("ALTER TABLE employee_cards_legacy RENAME TO employee_cards"))
    db.commit()
    db.expunge_all()


def storage_with(handler):
    return StorageClient(
        base_url="http://storage.test/storage/v1",
        service_key="service-key",
        transport=httpx.MockTransport(handler),
    )


class TestCreateEmployee:
    """Card creation, slugs and tenant checks."""

    def test_creates_card_with_slug(self, make_card, company):
        """A new card gets a slug from the full name and the company column."""
        card = make_card()

        assert card.public_slug == "maria-silva"
        assert card.company_id == company.id
        assert card.theme["company_id"] == company.id
        assert card.name == "Maria Silva"
        assert card.contact_links["phone"] == "+258841234567"
        assert card.social_links == {"linkedin": ""}

    def test_duplicate_name_gets_suffix(self, make_card):
        """The second Maria Silva gets maria-silva-1."""
        make_card()
        second = make_card()

        assert second.public_slug == "maria-silva-1"

    def test_default_photo(self, make_card):
        from bizcards.core.config import settings

        assert make_card().photo_url == settings.DEFAULT_PROFILE_PICTURE_URL

    def test_other_company_rejected(self, db, company, other_company, employee_payload):
        """Admins cannot provision cards for another company."""
        result = employee_service.create_employee(
            db=db,
            company_id=other_company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=company.id,
        )

        assert not result.success
        assert result.error == UNAUTHORIZED_COMPANY
        assert result.status_code == 403

    def test_unassigned_caller_rejected(self, db, company, employee_payload):
        """A caller without a company never passes the tenant check."""
        result = employee_service.create_employee(
            db=db,
            company_id=company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=None,
        )

        assert result.kind == ErrorKind.unauthorized

    def test_insert_conflict_retries_with_random_suffix(self, db, make_card, monkeypatch):
        """A slug taken between the check and the insert is retried, not surfaced."""
        make_card()
        monkeypatch.setattr(employee_card_crud, "slug_exists", lambda db, slug: False)

        second = make_card()

        assert second.public_slug.startswith("maria-silva-")
        assert second.public_slug != "maria-silva"
        assert len(db.execute(select(EmployeeCard)).scalars().all()) == 2


class TestPhotoUpload:
    """Profile photos are validated, then stored in the bucket."""

    def test_photo_is_uploaded(self, db, company, employee_payload, monkeypatch):
        """A valid JPEG is stored under the employee id with a MIME-derived extension."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"Key": "employee-photos/x"})

        monkeypatch.setattr(employee_service, "storage", storage_with(handler))

        result = employee_service.create_employee(
            db=db,
            company_id=company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=company.id,
            photo=PhotoUpload(filename="me.jpeg", content_type="image/jpeg", data=JPEG_BYTES),
        )

        assert result.success
        card = result.data
        assert card.photo_url.startswith(
            f"http://storage.test/storage/v1/object/public/employee-photos/{card.employee_id}/"
        )
        assert card.photo_url.endswith(".jpg")
        assert len(requests) == 1
        assert requests[0].headers["authorization"] == "Bearer service-key"
        assert requests[0].content == JPEG_BYTES

    def test_spoofed_photo_rejected(self, db, company, employee_payload, monkeypatch):
        """An executable declared as JPEG never reaches storage."""
        requests = []
        monkeypatch.setattr(
            employee_service, "storage", storage_with(lambda request: requests.append(request) or httpx.Response(200))
        )

        result = employee_service.create_employee(
            db=db,
            company_id=company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=company.id,
            photo=PhotoUpload(filename="photo.jpg", content_type="image/jpeg", data=b"MZ\x90\x00" + b"\x00" * 16),
        )

        assert not result.success
        assert result.field_errors[0].code == "invalid_file_content"
        assert requests == []
        assert db.execute(select(EmployeeCard)).first() is None

    def test_missing_bucket(self, db, company, employee_payload, monkeypatch):
        """A missing bucket is reported with an actionable message."""

        def handler(request):
            return httpx.Response(400, json={"statusCode": "404", "error": "Bucket not found", "message": "Bucket not found"})

        monkeypatch.setattr(employee_service, "storage", storage_with(handler))

        result = employee_service.create_employee(
            db=db,
            company_id=company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=company.id,
            photo=PhotoUpload(filename="me.jpg", content_type="image/jpeg", data=JPEG_BYTES),
        )

        assert not result.success
        assert result.status_code == 502
        assert 'Storage bucket "employee-photos" not found' in result.error
        assert db.execute(select(EmployeeCard)).first() is None

    def test_photo_not_stored_when_insert_fails(self, db, company, employee_payload, monkeypatch):
        """Storage is only written once the card row exists."""
        requests = []
        monkeypatch.setattr(
            employee_service, "storage", storage_with(lambda request: requests.append(request) or httpx.Response(200))
        )

        def slug_conflict(db, *, values):
            raise IntegrityError(
                "INSERT INTO employee_cards ...",
                {},
                Exception("UNIQUE constraint failed: employee_cards.public_slug"),
            )

        monkeypatch.setattr(employee_card_crud, "create", slug_conflict)

        result = employee_service.create_employee(
            db=db,
            company_id=company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=company.id,
            photo=PhotoUpload(filename="me.jpg", content_type="image/jpeg", data=JPEG_BYTES),
        )

        assert result.kind == ErrorKind.conflict
        assert requests == []


class TestUpdateEmployee:
    """Partial updates and ownership."""

    def test_partial_update_keeps_other_fields(self, db, company, make_card):
        """Only supplied fields change."""
        card = make_card()

        result = employee_service.update_employee(
            db=db,
            employee_id=card.employee_id,
            data=EmployeeUpdate(title="Senior Engineer"),
            caller_company_id=company.id,
        )

        assert result.success
        updated = result.data
        assert updated.title == "Senior Engineer"
        assert updated.name == "Maria Silva"
        assert updated.contact_links == card.contact_links
        assert updated.public_slug == card.public_slug

    def test_name_requires_both_parts(self, db, company, make_card):
        """A lone first name leaves the stored name untouched."""
        card = make_card()

        result = employee_service.update_employee(
            db=db,
            employee_id=card.employee_id,
            data=EmployeeUpdate(first_name="Mariana"),
            caller_company_id=company.id,
        )

        assert result.data.name == "Maria Silva"

    def test_title_translations(self, db, company, make_card):
        """Translations are stored, and an empty map removes them."""
        card = make_card()

        result = employee_service.update_employee(
            db=db,
            employee_id=card.employee_id,
            data=EmployeeUpdate(title_translations={"pt": "Engenheira", "fr": "  "}),
            caller_company_id=company.id,
        )
        assert result.data.title_translations == {"pt": "Engenheira"}

        result = employee_service.update_employee(
            db=db,
            employee_id=card.employee_id,
            data=EmployeeUpdate(title_translations={}),
            caller_company_id=company.id,
        )
        assert result.data.title_translations is None

    def test_other_company_cannot_update(self, db, other_company, make_card):
        card = make_card()

        result = employee_service.update_employee(
            db=db,
            employee_id=card.employee_id,
            data=EmployeeUpdate(title="Intruder"),
            caller_company_id=other_company.id,
        )

        assert result.error == UNAUTHORIZED_EMPLOYEE

    def test_unknown_employee(self, db, company):
        result = employee_service.update_employee(
            db=db,
            employee_id="00000000-0000-0000-0000-000000000000",
            data=EmployeeUpdate(title="Ghost"),
            caller_company_id=company.id,
        )

        assert result.status_code == 404

    def test_legacy_card_is_promoted(self, db, company, make_card):
        """Updating a theme-scoped card fills in the company column."""
        card = make_card()
        row = db.get(EmployeeCard, card.id)
        row.company_id = None
        db.commit()

        result = employee_service.update_employee(
            db=db,
            employee_id=card.employee_id,
            data=EmployeeUpdate(title="Engineer"),
            caller_company_id=company.id,
        )

        assert result.success
        db.refresh(row)
        assert row.company_id == company.id


class TestStatusAndDelete:
    """Activation toggling and deletion."""

    def test_toggle_status(self, db, company, make_card):
        card = make_card()

        result = employee_service.toggle_employee_status(
            db=db,
            employee_id=card.employee_id,
            is_active=False,
            caller_company_id=company.id,
        )

        assert result.success
        assert result.data.is_active is False

    def test_delete(self, db, company, make_card):
        """Deleted cards are gone from the store."""
        card = make_card()

        result = employee_service.delete_employee(
            db=db,
            employee_id=card.employee_id,
            caller_company_id=company.id,
        )

        assert result.success
        assert employee_card_crud.get_by_slug(db, card.public_slug) is None

    def test_delete_other_company(self, db, other_company, make_card):
        card = make_card()

        result = employee_service.delete_employee(
            db=db,
            employee_id=card.employee_id,
            caller_company_id=other_company.id,
        )

        assert result.kind == ErrorKind.unauthorized
        assert employee_card_crud.get_by_slug(db, card.public_slug) is not None


class TestListEmployees:
    """Company listing with the legacy fallback."""

    def test_lists_company_cards(self, db, company, other_company, make_card):
        """Only the company's own cards are returned."""
        make_card()
        make_card(first_name="Carlos", last_name="Mondlane")

        result = employee_service.get_employees_by_company(
            db=db, company_id=company.id, caller_company_id=company.id
        )

        assert result.success
        assert {card.public_slug for card in result.data} == {"maria-silva", "carlos-mondlane"}

        other = employee_service.get_employees_by_company(
            db=db, company_id=other_company.id, caller_company_id=other_company.id
        )
        assert other.data == []

    def test_cross_company_listing_rejected(self, db, company, other_company):
        result = employee_service.get_employees_by_company(
            db=db, company_id=other_company.id, caller_company_id=company.id
        )

        assert result.error == UNAUTHORIZED_COMPANY

    def test_falls_back_to_theme_when_column_missing(self, db, company, other_company, employee_payload, make_card):
        """On a table without company_id, cards are filtered by their theme."""
        make_card()
        employee_payload.update(first_name="Carlos", last_name="Mondlane")
        other = employee_service.create_employee(
            db=db,
            company_id=other_company.id,
            data=EmployeeCreate(**employee_payload),
            caller_company_id=other_company.id,
        )
        assert other.success, other.error
        rebuild_without_company_column(db)

        result = employee_service.get_employees_by_company(
            db=db, company_id=company.id, caller_company_id=company.id
        )

        assert result.success, result.error
        assert [card.public_slug for card in result.data] == ["maria-silva"]
        assert result.data[0].company_id == company.id

    def test_other_database_errors_are_reported(self, db, company, make_card, monkeypatch):
        """Errors other than a missing column surface as a failed listing."""
        make_card()

        def database_locked(db, company_id):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(employee_card_crud, "get_multi_by_company_column", database_locked)

        result = employee_service.get_employees_by_company(
            db=db, company_id=company.id, caller_company_id=company.id
        )

        assert not result.success
        assert result.status_code == 502
        assert result.error.startswith("Failed to list employees:")
        assert "database is locked" in result.error

    def test_missing_column_detection(self):
        """Only missing-column database errors trigger the fallback."""
        assert is_missing_column_error(missing_column_error())
        assert not is_missing_column_error(ValueError("no such column"))
        assert not is_missing_column_error(
            OperationalError("SELECT 1", {}, Exception("database is locked"))
        )
