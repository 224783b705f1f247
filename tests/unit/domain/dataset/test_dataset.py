"""Unit tests for the Dataset aggregate and its access policies."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from datareg.domain.auth.model.value import ActorId
from datareg.domain.dataset.model.aggregate import Dataset
from datareg.domain.dataset.model.value import DatasetId
from datareg.domain.dataset.policy import CAN_COUNT, CAN_MUTATE, CAN_READ

ALICE = ActorId("alice")
BOB = ActorId("bob")


def _make_dataset(**overrides) -> Dataset:
    defaults = dict(
        id=DatasetId(0),
        dataset_ref="bafy-data-1",
        analysis_ref="bafy-analysis-1",
        owner=ALICE,
        is_public=False,
        created_at=datetime.now(UTC),
    )
    defaults.update(overrides)
    return Dataset(**defaults)


class TestDataset:
    def test_counters_start_at_zero(self):
        ds = _make_dataset()
        assert (ds.views, ds.downloads, ds.citations) == (0, 0, 0)

    def test_empty_dataset_ref_rejected(self):
        with pytest.raises(ValidationError):
            _make_dataset(dataset_ref="")

    def test_negative_id_rejected(self):
        with pytest.raises(ValidationError):
            _make_dataset(id=DatasetId(-1))

    def test_is_frozen(self):
        ds = _make_dataset()
        with pytest.raises(ValidationError):
            ds.analysis_ref = "other"  # type: ignore[misc]

    def test_with_analysis_returns_changed_copy(self):
        ds = _make_dataset()
        updated = ds.with_analysis("bafy-analysis-2")
        assert updated.analysis_ref == "bafy-analysis-2"
        assert ds.analysis_ref == "bafy-analysis-1"
        assert updated.dataset_ref == ds.dataset_ref
        assert updated.owner == ds.owner

    def test_with_visibility_returns_changed_copy(self):
        ds = _make_dataset(is_public=False)
        assert ds.with_visibility(True).is_public is True
        assert ds.is_public is False

    def test_is_owned_by(self):
        ds = _make_dataset(owner=ALICE)
        assert ds.is_owned_by(ALICE)
        assert not ds.is_owned_by(BOB)
        assert not ds.is_owned_by(None)


class TestPolicies:
    @pytest.mark.parametrize(
        ("is_public", "actor", "expected"),
        [
            (True, ALICE, True),
            (True, BOB, True),
            (True, None, True),
            (False, ALICE, True),
            (False, BOB, False),
            (False, None, False),
        ],
    )
    def test_read_and_count_follow_visibility_or_ownership(self, is_public, actor, expected):
        ds = _make_dataset(is_public=is_public)
        assert CAN_READ.evaluate(actor, ds) is expected
        assert CAN_COUNT.evaluate(actor, ds) is expected

    @pytest.mark.parametrize("is_public", [True, False])
    def test_only_owner_may_mutate(self, is_public):
        ds = _make_dataset(is_public=is_public)
        assert CAN_MUTATE.evaluate(ALICE, ds)
        assert not CAN_MUTATE.evaluate(BOB, ds)
        assert not CAN_MUTATE.evaluate(None, ds)
