"""
Tests for the public card page, its PWA manifest and the vCard export.
"""

import base64

import httpx

from bizcards.core.config import settings
from bizcards.models.company_service import CompanyService
from bizcards.schemas.card import PublicCard, PublicCompany
from bizcards.services.card import MANIFEST_FALLBACK_NAME, public_card_service
from bizcards.services.employee import employee_service
from bizcards.services.vcard import escape_vcard_value, generate_vcard, photo_fetch_allowed, vcard_filename
from bizcards.utils.file_validation import MAX_FILE_SIZE


def photo_transport(status_code=200, content=b"\xff\xd8\xff\xe0photo", content_type="image/jpeg"):
    return httpx.MockTransport(
        lambda request: httpx.Response(status_code, content=content, headers={"content-type": content_type})
    )


class TestPublicCardPage:
    """Localized public card documents."""

    def test_active_card(self, client, company, make_card):
        """An active card resolves with its company."""
        make_card()

        response = client.get("/en/card/maria-silva")

        assert response.status_code == 200
        card = response.json()["data"]
        assert card["name"] == "Maria Silva"
        assert card["title"] == "Engineer"
        assert card["company"]["name"] == "CFM"
        assert card["email"] == "maria.silva@cfm.co.mz"
        assert card["dir"] == "ltr"
        assert card["card_url"] == f"{settings.PUBLIC_BASE_URL}/en/card/maria-silva"

    def test_inactive_card_is_not_found(self, client, db, company, make_card):
        """Deactivated cards look exactly like unknown slugs."""
        card = make_card()
        employee_service.toggle_employee_status(
            db=db, employee_id=card.employee_id, is_active=False, caller_company_id=company.id
        )

        inactive = client.get("/en/card/maria-silva")
        unknown = client.get("/en/card/nobody-here")

        assert inactive.status_code == 404
        assert inactive.json() == unknown.json() == {"success": False, "error": "Card not found"}

    def test_predefined_title_is_translated(self, client, make_card):
        """Catalog titles follow the page locale."""
        make_card(title="Executive Board Director")

        response = client.get("/pt/card/maria-silva")

        assert response.json()["data"]["title"] == "Administrador Executivo"
        assert response.json()["data"]["locale"] == "pt"

    def test_custom_title_translation(self, client, make_card):
        make_card(title="Port Pilot", title_translations={"pt": "Piloto do Porto"})

        assert client.get("/pt/card/maria-silva").json()["data"]["title"] == "Piloto do Porto"
        assert client.get("/fr/card/maria-silva").json()["data"]["title"] == "Port Pilot"

    def test_rtl_locale(self, client, make_card):
        make_card()

        assert client.get("/ar/card/maria-silva").json()["data"]["dir"] == "rtl"

    def test_company_services_are_localized(self, client, db, company, make_card):
        """Service tiles use their translation for the page locale."""
        make_card()
        db.add(CompanyService(
            company_id=company.id,
            title="Logistics",
            description="Rail freight",
            title_translations={"pt": "Logística"},
            display_order=1,
        ))
        db.commit()

        services = client.get("/pt/card/maria-silva").json()["data"]["company"]["services"]

        assert [s["title"] for s in services] == ["Logística"]
        assert services[0]["description"] == "Rail freight"


class TestManifest:
    """PWA manifest per card."""

    def test_manifest_named_after_owner(self, client, make_card):
        make_card()

        response = client.get("/en/card/maria-silva/manifest.json")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/manifest+json")
        assert response.headers["cache-control"] == "public, max-age=3600"
        manifest = response.json()
        assert manifest["name"] == "Maria Silva"
        assert manifest["start_url"] == "/en/card/maria-silva"

    def test_unknown_card_uses_fallback_name(self, client):
        """Unknown cards still get a manifest, with a generic name."""
        response = client.get("/en/card/nobody/manifest.json")

        assert response.status_code == 200
        assert response.json()["name"] == MANIFEST_FALLBACK_NAME


class TestVCardEndpoint:
    """vCard download."""

    def test_download_embeds_photo(self, client, make_card, monkeypatch):
        """Fetched photos are embedded as base64."""
        make_card()
        monkeypatch.setattr(public_card_service, "photo_transport", photo_transport())

        response = client.get("/en/card/maria-silva/vcard")

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/vcard; charset=utf-8"
        assert response.headers["content-disposition"] == 'attachment; filename="Maria-Silva.vcf"'
        body = response.text
        assert body.startswith("BEGIN:VCARD\r\nVERSION:3.0\r\n")
        assert "FN:Maria Silva\r\n" in body
        assert "N:Silva;Maria;;;\r\n" in body
        assert "ORG:CFM\r\n" in body
        assert "TEL;TYPE=CELL,VOICE:+258841234567\r\n" in body
        encoded = base64.b64encode(b"\xff\xd8\xff\xe0photo").decode("ascii")
        assert f"PHOTO;ENCODING=b;TYPE=JPEG:{encoded}\r\n" in body
        assert "URL;TYPE=OTHER:" in body

    def test_photo_failure_falls_back_to_url(self, client, make_card, monkeypatch):
        """When the photo cannot be fetched it is referenced by URL."""
        make_card()
        monkeypatch.setattr(public_card_service, "photo_transport", photo_transport(status_code=404))

        body = client.get("/en/card/maria-silva/vcard").text

        assert f"PHOTO;VALUE=URI;TYPE=URL:{settings.DEFAULT_PROFILE_PICTURE_URL}\r\n" in body
        assert "ENCODING=b" not in body

    def test_photo_outside_storage_is_never_fetched(self, client, make_card, monkeypatch):
        """Admin-supplied hosts such as cloud metadata are only referenced by URL."""
        metadata_url = "http://169.254.169.254/latest/meta-data/iam/security-credentials/"
        card = make_card(photo_url=metadata_url)
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, content=b"AWS_SECRET=abc", headers={"content-type": "text/plain"})

        monkeypatch.setattr(public_card_service, "photo_transport", httpx.MockTransport(handler))

        body = client.get("/en/card/maria-silva/vcard").text

        assert requests == []
        assert f"PHOTO;VALUE=URI;TYPE=URL:{card.photo_url}\r\n" in body
        assert "169.254.169.254" in card.photo_url
        assert base64.b64encode(b"AWS_SECRET=abc").decode("ascii") not in body

    def test_non_image_body_is_not_embedded(self, client, make_card, monkeypatch):
        make_card()
        monkeypatch.setattr(
            public_card_service,
            "photo_transport",
            photo_transport(content=b"AWS_SECRET=abc", content_type="text/plain"),
        )

        body = client.get("/en/card/maria-silva/vcard").text

        assert "ENCODING=b" not in body
        assert f"PHOTO;VALUE=URI;TYPE=URL:{settings.DEFAULT_PROFILE_PICTURE_URL}\r\n" in body

    def test_mismatched_image_bytes_are_not_embedded(self, client, make_card, monkeypatch):
        """Bytes must match the declared image type."""
        make_card()
        monkeypatch.setattr(public_card_service, "photo_transport", photo_transport(content=b"MZ\x90\x00exe"))

        body = client.get("/en/card/maria-silva/vcard").text

        assert "ENCODING=b" not in body

    def test_redirects_are_not_followed(self, client, make_card, monkeypatch):
        make_card()
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(302, headers={"location": "http://169.254.169.254/latest/meta-data/"})

        monkeypatch.setattr(public_card_service, "photo_transport", httpx.MockTransport(handler))

        body = client.get("/en/card/maria-silva/vcard").text

        assert [str(request.url) for request in requests] == [settings.DEFAULT_PROFILE_PICTURE_URL]
        assert "ENCODING=b" not in body

    def test_oversized_photo_is_not_embedded(self, client, make_card, monkeypatch):
        make_card()
        oversized = b"\xff\xd8\xff\xe0" + b"\x00" * MAX_FILE_SIZE
        monkeypatch.setattr(public_card_service, "photo_transport", photo_transport(content=oversized))

        body = client.get("/en/card/maria-silva/vcard").text

        assert "ENCODING=b" not in body
        assert f"PHOTO;VALUE=URI;TYPE=URL:{settings.DEFAULT_PROFILE_PICTURE_URL}\r\n" in body

    def test_inactive_card_has_no_vcard(self, client, db, company, make_card):
        card = make_card()
        employee_service.toggle_employee_status(
            db=db, employee_id=card.employee_id, is_active=False, caller_company_id=company.id
        )

        assert client.get("/en/card/maria-silva/vcard").status_code == 404


class TestVCardFormat:
    """vCard text generation."""

    def make_card(self, **overrides):
        fields = dict(
            slug="ana-machava",
            name="Ana Machava",
            title="Head, Operations; Rail",
            photo_url=None,
            contact_links={"phone": "+258 84 123 4567", "whatsapp": "+258841234568", "email": "ana@cfm.co.mz"},
            social_links={},
            company=PublicCompany(
                id="c1",
                name="CFM",
                slug="cfm",
                description="Ports\nand railways",
                linkedin_url="https://linkedin.com/company/cfm",
            ),
            locale="en",
            dir="ltr",
            card_url="https://cards.cfm.co.mz/en/card/ana-machava",
        )
        fields.update(overrides)
        return PublicCard(**fields)

    def test_special_characters_escaped(self):
        """Commas, semicolons, backslashes and newlines are escaped."""
        assert escape_vcard_value("a,b;c\\d\ne") == "a\\,b\\;c\\\\d\\ne"

        vcard = generate_vcard(self.make_card())

        assert "TITLE:Head\\, Operations\\; Rail\r\n" in vcard
        assert "NOTE:Ports\\nand railways\\nHead\\, Operations\\; Rail at CFM\r\n" in vcard

    def test_phones_and_social_profiles(self):
        vcard = generate_vcard(self.make_card())

        assert "TEL;TYPE=CELL,VOICE:+258841234567\r\n" in vcard
        assert "TEL;TYPE=CELL,WA:+258841234568\r\n" in vcard
        assert "X-SOCIALPROFILE;TYPE=linkedin:https://linkedin.com/company/cfm\r\n" in vcard
        assert "URL;TYPE=OTHER:https://cards.cfm.co.mz/en/card/ana-machava\r\n" in vcard

    def test_email_and_urls_escaped(self):
        """Separators inside EMAIL and URL values cannot break the line."""
        vcard = generate_vcard(self.make_card(
            contact_links={"email": "ana;x@cfm.co.mz", "website": "https://cfm.co.mz/a,b;c"},
        ))

        assert "EMAIL;TYPE=INTERNET:ana\\;x@cfm.co.mz\r\n" in vcard
        assert "URL:https://cfm.co.mz/a\\,b\\;c\r\n" in vcard

    def test_photo_fetch_allowed(self):
        storage_photo = f"{settings.STORAGE_URL}/object/public/employee-photos/e1/1.jpg"

        assert photo_fetch_allowed(storage_photo)
        assert photo_fetch_allowed(settings.DEFAULT_PROFILE_PICTURE_URL)
        assert not photo_fetch_allowed("http://169.254.169.254/latest/meta-data/")
        assert not photo_fetch_allowed(f"{settings.STORAGE_URL}/object/employee-photos/e1/1.jpg")
        assert not photo_fetch_allowed(f"{settings.STORAGE_URL}/object/public/../../admin")

    def test_no_photo_line_without_photo(self):
        assert "PHOTO" not in generate_vcard(self.make_card())

    def test_single_word_name(self):
        """A one-word name becomes the given name."""
        vcard = generate_vcard(self.make_card(name="Madonna"))

        assert "N:;Madonna;;;\r\n" in vcard

    def test_filename(self):
        assert vcard_filename("Ana  Maria Machava") == "Ana-Maria-Machava.vcf"
        assert vcard_filename("") == "contact.vcf"
