from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import ETHER
from landverse.core.config import ContractVersion, IndexingStrategy
from ingestion.abi import catalogue_for
from landverse.domain import (
    V1_EVENT_TYPES,
    V2_EVENT_TYPES,
    FeeUpdated,
    RoleAdminChanged,
    RoleGranted,
    RoleRevoked,
    Sold,
    SoldV2,
)
from landverse.models import MarketplaceConfig
from pipelines.context import HandlerContext
from pipelines.dispatch import EventDispatcher
from pipelines.registry import UnknownPipelineError, available_pipelines, get_pipeline


def test_dispatch_routes_by_event_type(events):
    handler = MagicMock()
    dispatcher = EventDispatcher("test", {Sold: handler})
    context = HandlerContext(store=MagicMock())
    sold = events.sold_v1(price=ETHER, price_after_fee=ETHER)

    assert dispatcher.dispatch(sold, context) is True
    handler.assert_called_once_with(sold, context)


def test_events_without_route_are_ignored(events):
    handler = MagicMock()
    dispatcher = EventDispatcher("test", {Sold: handler})

    assert dispatcher.dispatch(events.role_granted(), HandlerContext(store=MagicMock())) is False
    handler.assert_not_called()


def test_projection_pipelines_ignore_role_events():
    for version in ContractVersion:
        pipeline = get_pipeline(version, IndexingStrategy.PROJECTION)
        assert not pipeline.dispatcher.handles(RoleGranted)


def test_registry_selects_version_specific_routes():
    assert get_pipeline("v1", "projection").dispatcher.handles(Sold)
    assert not get_pipeline("v1", "projection").dispatcher.handles(SoldV2)
    assert get_pipeline("v2", "projection").dispatcher.handles(FeeUpdated)
    assert get_pipeline("v2", "event_log").dispatcher.handles(RoleGranted)
    assert {p.name for p in available_pipelines()} == {
        "v1-projection",
        "v2-projection",
        "v1-event-log",
        "v2-event-log",
    }


def test_unknown_pipeline_raises():
    with pytest.raises(UnknownPipelineError):
        get_pipeline("v3", "projection")
    with pytest.raises(UnknownPipelineError):
        get_pipeline("v1", "snapshot")


def test_process_applies_events_in_chain_order(session, events):
    """Config changes earlier in the chain apply before later trades, whatever the input order."""
    pipeline = get_pipeline("v1", "projection")
    context = pipeline.bind(session)
    later_pause = events.paused(block=20, log_index=1)
    earlier_unpause = events.unpaused(block=20, log_index=0)
    first_fee = events.set_total_fee_percent(5, block=19)

    handled = pipeline.process([later_pause, earlier_unpause, first_fee], context)
    session.flush()

    assert handled == 3
    config = session.get(MarketplaceConfig, "1")
    assert config.paused is True
    assert config.total_fee_percent == 5


def test_process_counts_only_routed_events(session, events):
    pipeline = get_pipeline("v1", "projection")
    context = pipeline.bind(session)
    assert pipeline.process([events.role_granted(), events.paused()], context) == 1


@pytest.mark.parametrize(
    "version, event_types",
    [(ContractVersion.V1, V1_EVENT_TYPES), (ContractVersion.V2, V2_EVENT_TYPES)],
)
def test_every_contract_event_is_decoded_and_routed(version, event_types):
    catalogue = catalogue_for(version)
    assert len(catalogue) == len(event_types)
    assert {entry.event_type for entry in catalogue.entries} == set(event_types)

    event_log = get_pipeline(version, IndexingStrategy.EVENT_LOG).dispatcher
    assert set(event_log.event_types) == set(event_types)

    # role changes are only kept by the raw event log
    projection = get_pipeline(version, IndexingStrategy.PROJECTION).dispatcher
    assert set(projection.event_types) == set(event_types) - {
        RoleAdminChanged,
        RoleGranted,
        RoleRevoked,
    }
