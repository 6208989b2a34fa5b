"""
Tests for public slug generation.
"""

from bizcards.utils.slug import MAX_SEQUENTIAL_ATTEMPTS, generate_slug, generate_unique_slug


class TestGenerateSlug:
    """Slugs derived from display names."""

    def test_simple_name(self):
        """Words are lowercased and joined with hyphens."""
        assert generate_slug("Maria Silva") == "maria-silva"

    def test_accents_are_stripped(self):
        """Diacritics fold to ASCII and punctuation collapses."""
        assert generate_slug("José d'Ávila") == "jose-d-avila"

    def test_no_leading_or_trailing_hyphens(self):
        """Surrounding punctuation never leaves stray hyphens."""
        assert generate_slug("  --João   Nhaca!! ") == "joao-nhaca"

    def test_non_latin_name_falls_back_to_hash(self):
        """Names without ASCII letters still get a stable slug."""
        slug = generate_slug("李小龍")
        assert slug.startswith("card-")
        assert slug == generate_slug("李小龍")


class TestGenerateUniqueSlug:
    """Resolving collisions against existing slugs."""

    def test_free_base_is_kept(self):
        """An unused base slug is returned unchanged."""
        assert generate_unique_slug("maria-silva", lambda slug: False) == "maria-silva"

    def test_sequential_suffix(self):
        """Taken slugs get the first free numeric suffix."""
        taken = {"maria-silva", "maria-silva-1"}
        assert generate_unique_slug("maria-silva", taken.__contains__) == "maria-silva-2"

    def test_randomize_skips_sequential_suffixes(self):
        """After an insert conflict a random suffix is used straight away."""
        slug = generate_unique_slug("maria-silva", lambda slug: False, randomize=True)
        assert slug.startswith("maria-silva-")
        assert slug != "maria-silva-1"
        assert len(slug.removeprefix("maria-silva-")) == 6

    def test_always_terminates(self):
        """Even when every lookup reports a collision a slug comes back."""
        checked = []

        def always_taken(slug):
            checked.append(slug)
            return True

        slug = generate_unique_slug("maria-silva", always_taken)
        assert slug.startswith("maria-silva-")
        assert len(checked) > MAX_SEQUENTIAL_ATTEMPTS
