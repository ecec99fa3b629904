"""Test station/status merging and display filters."""

from datetime import datetime, timezone

from mobidash.schemas.gbfs import (
    FeedSnapshot,
    FreeVehicle,
    OperatorInfo,
    Station,
    StationStatus,
)
from mobidash.services.views import (
    active_free_vehicles,
    build_overview,
    merge_station_status,
    search_stations,
    summarize,
)


def _station(station_id, name, **extra):
    return Station(station_id=station_id, name=name, lat=40.7, lon=-74.0, **extra)


def _status(station_id, bikes, docks, renting=True, returning=True):
    return StationStatus(
        station_id=station_id,
        num_bikes_available=bikes,
        num_docks_available=docks,
        is_renting=renting,
        is_returning=returning,
    )


class TestMerge:
    """Test the station/status join."""

    def test_status_fields_copied(self):
        """Test status fields copied."""
        views = merge_station_status([_station("1", "A")], [_status("1", 4, 9)])

        assert views[0].available_bikes == 4
        assert views[0].available_docks == 9
        assert views[0].is_active is True

    def test_missing_status_is_zero_and_inactive(self):
        """Test missing status is zero and inactive."""
        views = merge_station_status([_station("1", "A")], [_status("2", 4, 9)])

        assert views[0].available_bikes == 0
        assert views[0].available_docks == 0
        assert views[0].is_active is False

    def test_active_requires_renting_and_returning(self):
        """Test active requires renting and returning."""
        views = merge_station_status(
            [_station("1", "A"), _station("2", "B")],
            [_status("1", 1, 1, renting=True, returning=False), _status("2", 1, 1, renting=False, returning=True)],
        )

        assert [v.is_active for v in views] == [False, False]

    def test_status_without_docks(self):
        """Test status without docks."""
        status = StationStatus(station_id="1", num_bikes_available=3, is_renting=True, is_returning=True)

        views = merge_station_status([_station("1", "A")], [status])

        assert views[0].available_docks == 0


class TestFilters:
    def test_disabled_vehicles_removed(self):
        """Test disabled vehicles removed."""
        vehicles = [
            FreeVehicle(bike_id="a", is_disabled=False),
            FreeVehicle(bike_id="b", is_disabled=True),
        ]

        assert [v.bike_id for v in active_free_vehicles(vehicles)] == ["a"]

    def test_search_matches_name_and_address(self):
        """Test search matches name and address."""
        views = merge_station_status(
            [_station("1", "Broadway & W 60 St"), _station("2", "Pier 40", address="353 West St")],
            [],
        )

        assert [v.station_id for v in search_stations(views, "broadway")] == ["1"]
        assert [v.station_id for v in search_stations(views, "WEST ST")] == ["2"]
        assert len(search_stations(views, "")) == 2
        assert len(search_stations(views, None)) == 2

    def test_summary(self):
        """Test summary."""
        views = merge_station_status(
            [_station("1", "A"), _station("2", "B"), _station("3", "C")],
            [_status("1", 3, 5), _status("2", 2, 1, returning=False)],
        )

        stats = summarize(views, [FreeVehicle(bike_id="x")])

        assert stats.total_stations == 3
        assert stats.total_bikes == 5
        assert stats.total_docks == 6
        assert stats.active_stations == 1
        assert stats.free_vehicles == 1


def test_build_overview_active_only_and_stats():
    """Test build overview active only and stats."""
    snapshot = FeedSnapshot(
        stations=[_station("1", "Alpha"), _station("2", "Beta")],
        station_statuses=[_status("1", 5, 5)],
        free_vehicles=[FreeVehicle(bike_id="v1"), FreeVehicle(bike_id="v2", is_disabled=True)],
        last_updated=datetime(2025, 1, 6, tzinfo=timezone.utc),
    )
    operator = OperatorInfo(id="op", name="Op", location="Somewhere")

    overview = build_overview(operator, snapshot, active_only=True)

    assert [s.station_id for s in overview.stations] == ["1"]
    assert overview.stats.total_stations == 2
    assert [v.bike_id for v in overview.free_vehicles] == ["v1"]
