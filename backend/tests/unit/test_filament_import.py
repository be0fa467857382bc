"""Tests for identity matching and import reconciliation."""

from datetime import datetime, timezone

import pytest

from backend.app.services.filament_import import (
    IDENTITY_FIELDS,
    ImportAnalysis,
    ImportPolicy,
    analyze_import,
    apply_import,
    identity_key,
    matches_identity,
    merge_duplicates,
)

LONG_AGO = datetime(2020, 1, 1, tzinfo=timezone.utc)


class TestMatchesIdentity:
    """Test the same-spool-type relation."""

    def test_identical_fields_match(self, make_filament):
        assert matches_identity(make_filament(), make_filament())

    def test_reflexive(self, sample_filaments):
        for filament in sample_filaments:
            assert matches_identity(filament, filament)

    def test_symmetric(self, sample_filaments, make_filament):
        others = sample_filaments + [make_filament(brand="Hatchbox", color_name="Matte Black")]
        for a in others:
            for b in others:
                assert matches_identity(a, b) == matches_identity(b, a)

    @pytest.mark.parametrize(
        "field_name,value",
        [
            ("brand", "Prusament"),
            ("material", "PETG"),
            ("color_name", "Blue"),
            ("color_hex", "#0000FF"),
            ("diameter", 2.85),
            ("spool_weight", 750.0),
        ],
    )
    def test_any_identity_field_difference_breaks_match(self, make_filament, field_name, value):
        assert not matches_identity(make_filament(), make_filament(**{field_name: value}))

    def test_comparison_is_case_sensitive(self, make_filament):
        assert not matches_identity(make_filament(brand="Hatchbox"), make_filament(brand="hatchbox"))
        assert not matches_identity(make_filament(color_hex="#FF0000"), make_filament(color_hex="#ff0000"))

    def test_non_identity_fields_are_ignored(self, make_filament):
        a = make_filament(quantity=1, price=10.0, favorite=False, tags="a", notes="x", color_family="Red")
        b = make_filament(quantity=7, price=30.0, favorite=True, tags="b", notes=None, color_family="Pink")
        assert matches_identity(a, b)

    def test_identity_key_covers_identity_fields(self, make_filament):
        key = identity_key(make_filament())
        assert len(key) == len(IDENTITY_FIELDS)
        assert key == ("Hatchbox", "PLA", "Red", "#FF0000", 1.75, 1000.0)


class TestAnalyzeImport:
    """Test classification of an imported batch."""

    def test_empty_batch(self, sample_filaments):
        analysis = analyze_import([], sample_filaments)
        assert analysis.new_filaments == []
        assert analysis.duplicates == []
        assert not analysis.has_duplicates

    def test_empty_existing_makes_everything_new(self, sample_filaments):
        analysis = analyze_import(sample_filaments, [])
        assert analysis.new_filaments == sample_filaments
        assert analysis.duplicates == []

    def test_duplicate_is_paired_with_existing(self, make_filament):
        existing = make_filament(quantity=2)
        imported = make_filament(quantity=5)
        analysis = analyze_import([imported], [existing])
        assert analysis.new_filaments == []
        assert len(analysis.duplicates) == 1
        assert analysis.duplicates[0].existing is existing
        assert analysis.duplicates[0].imported is imported

    def test_first_matching_existing_record_wins(self, make_filament):
        first = make_filament(notes="first")
        second = make_filament(notes="second")
        analysis = analyze_import([make_filament()], [first, second])
        assert analysis.duplicates[0].existing is first

    def test_import_order_is_preserved(self, make_filament):
        existing = [make_filament(color_name="Red"), make_filament(color_name="Blue")]
        imported = [
            make_filament(color_name="Green"),
            make_filament(color_name="Blue"),
            make_filament(color_name="Yellow"),
            make_filament(color_name="Red"),
        ]
        analysis = analyze_import(imported, existing)
        assert [f.color_name for f in analysis.new_filaments] == ["Green", "Yellow"]
        assert [m.imported.color_name for m in analysis.duplicates] == ["Blue", "Red"]

    def test_internal_duplicates_each_match_same_existing(self, make_filament):
        existing = make_filament()
        imported = [make_filament(quantity=1), make_filament(quantity=2)]
        analysis = analyze_import(imported, [existing])
        assert [m.existing for m in analysis.duplicates] == [existing, existing]

    def test_internal_duplicates_without_existing_are_both_new(self, make_filament):
        imported = [make_filament(), make_filament()]
        analysis = analyze_import(imported, [])
        assert analysis.new_filaments == imported

    def test_partition_counts(self, sample_filaments, make_filament):
        imported = [
            make_filament(brand="Hatchbox", color_name="Matte Black", color_hex="#1A1A1A"),
            make_filament(brand="Prusament"),
            make_filament(brand="Polymaker", material="PETG", color_name="Ocean Blue", color_hex="#1E90FF"),
        ]
        analysis = analyze_import(imported, sample_filaments)
        assert len(analysis.new_filaments) + len(analysis.duplicates) == len(imported)
        assert analysis.total == len(imported)
        sources = [id(f) for f in analysis.new_filaments] + [id(m.imported) for m in analysis.duplicates]
        assert sorted(sources) == sorted(id(f) for f in imported)

    def test_does_not_modify_inputs(self, make_filament):
        existing = make_filament(quantity=2)
        analyze_import([make_filament(quantity=3)], [existing])
        assert existing.quantity == 2


class TestMergeIncrements:
    """Test folding several merges into one existing record."""

    def test_sums_per_existing_record_in_first_seen_order(self, make_filament):
        red = make_filament(color_name="Red")
        blue = make_filament(color_name="Blue")
        imported = [
            make_filament(color_name="Blue", quantity=1),
            make_filament(color_name="Red", quantity=2),
            make_filament(color_name="Blue", quantity=4),
        ]
        increments = analyze_import(imported, [red, blue]).merge_increments()
        assert increments == [(blue, 5), (red, 2)]

    def test_no_duplicates_no_increments(self):
        assert ImportAnalysis().merge_increments() == []


class TestMergeDuplicates:
    """Test applying the merge policy in memory."""

    def test_merge_adds_quantity_and_refreshes_updated_at(self, make_filament):
        existing = make_filament(quantity=2, created_at=LONG_AGO)
        analysis = analyze_import([make_filament(quantity=3)], [existing])

        merged = merge_duplicates(analysis)

        assert merged == 1
        assert existing.quantity == 5
        assert existing.updated_at > LONG_AGO
        assert existing.created_at == LONG_AGO

    def test_sequential_merges_into_same_record(self, make_filament):
        existing = make_filament(quantity=1)
        analysis = analyze_import([make_filament(quantity=2), make_filament(quantity=3)], [existing])
        merge_duplicates(analysis)
        assert existing.quantity == 6


class TestApplyImport:
    """Test persisting an analyzed import."""

    @pytest.mark.asyncio
    async def test_merge_policy(self, db_session, filament_factory, make_filament):
        from sqlalchemy import select

        from backend.app.models.filament import Filament

        existing = await filament_factory(quantity=2)
        analysis = analyze_import([make_filament(quantity=4)], [existing])

        result = await apply_import(db_session, analysis, ImportPolicy.MERGE)

        assert (result.inserted, result.merged, result.skipped) == (0, 1, 0)
        rows = (await db_session.execute(select(Filament))).scalars().all()
        assert len(rows) == 1
        assert rows[0].quantity == 6

    @pytest.mark.asyncio
    async def test_skip_policy(self, db_session, filament_factory, make_filament):
        from sqlalchemy import select

        from backend.app.models.filament import Filament

        existing = await filament_factory(quantity=2)
        analysis = analyze_import([make_filament(quantity=4)], [existing])

        result = await apply_import(db_session, analysis, ImportPolicy.SKIP)

        assert (result.inserted, result.merged, result.skipped) == (0, 0, 1)
        rows = (await db_session.execute(select(Filament))).scalars().all()
        assert len(rows) == 1
        assert rows[0].quantity == 2

    @pytest.mark.asyncio
    async def test_new_records_inserted_without_policy(self, db_session, make_filament):
        from sqlalchemy import func, select

        from backend.app.models.filament import Filament

        analysis = analyze_import([make_filament(), make_filament(brand="eSUN")], [])
        result = await apply_import(db_session, analysis)

        assert result.inserted == 2
        count = (await db_session.execute(select(func.count()).select_from(Filament))).scalar_one()
        assert count == 2

    @pytest.mark.asyncio
    async def test_duplicates_require_policy(self, db_session, make_filament):
        existing = make_filament()
        analysis = analyze_import([make_filament()], [existing])
        with pytest.raises(ValueError):
            await apply_import(db_session, analysis)
