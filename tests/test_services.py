"""Tests for the service inventory."""

from conftest import FakeCommandSource

from procinv.config import InventoryConfig
from procinv.models import ServiceRecord, ServiceState
from procinv.services import (
    ServiceInventory,
    legacy_service_names,
    list_directory,
    parse_service_lines,
)

SVCS_OUTPUT = [
    "STATE          STIME    FMRI",
    "legacy_run     23:56:49 lrc:/etc/rc2_d/S47pppd",
    "legacy_run     23:56:49 lrc:/etc/rc2_d/S89PRESERVE",
    "online         23:56:25 svc:/system/early-manifest-import:default",
    "online         23:56:25 svc:/system/svc/restarter:default",
    "               23:56:24       13 svc.startd",
    "disabled       23:56:20 svc:/network/ipfilter:default",
]


class TestParseServiceLines:
    """Tests for classifying svcs -p lines."""

    def test_online_line_is_stopped(self):
        """
        Test an ``online`` line yields a STOPPED record with no pid.

        This pins the current classification: the pid-bearing continuation
        lines are the RUNNING entries, the ``online`` FMRI lines are not.
        Changing it must be a deliberate edit to this test.
        """
        services = parse_service_lines(
            ["online 23:56:25 svc:/system/svc/restarter:default"], []
        )

        assert services == [ServiceRecord("system/svc/restarter", 0, ServiceState.STOPPED)]

    def test_online_without_default_suffix(self):
        services = parse_service_lines(["online 10:00:00 svc:/network/ssh:other"], [])

        assert services[0].name == "network/ssh:other"

    def test_online_without_fmri_ignored(self):
        assert parse_service_lines(["online 10:00:00 nothing-here"], []) == []

    def test_process_line_is_running(self):
        """Test an indented pid line yields a RUNNING record."""
        services = parse_service_lines(["               23:56:24       13 svc.startd"], [])

        assert services == [ServiceRecord("svc.startd", 13, ServiceState.RUNNING)]

    def test_process_line_wrong_field_count_ignored(self):
        assert parse_service_lines(["   23:56:24 13"], []) == []
        assert parse_service_lines(["   23:56:24 13 a b"], []) == []

    def test_legacy_run_matches_first_name(self):
        """Test a legacy_run line emits one record for the first matching script."""
        line = "legacy_run     23:56:49 lrc:/etc/rc2_d/S47pppd"

        services = parse_service_lines([line], ["S47pppd", "pppd", "S47pppd"])

        assert services == [ServiceRecord("S47pppd", 0, ServiceState.STOPPED)]

    def test_legacy_run_without_script(self):
        line = "legacy_run     23:56:49 lrc:/etc/rc2_d/S47pppd"
        assert parse_service_lines([line], ["nfs.server"]) == []

    def test_full_listing(self):
        """Test a realistic listing keeps encounter order and skips other states."""
        services = parse_service_lines(SVCS_OUTPUT, ["S89PRESERVE", "S47pppd"])

        assert [(s.name, s.process_id, s.state) for s in services] == [
            ("S47pppd", 0, ServiceState.STOPPED),
            ("S89PRESERVE", 0, ServiceState.STOPPED),
            ("system/early-manifest-import", 0, ServiceState.STOPPED),
            ("system/svc/restarter", 0, ServiceState.STOPPED),
            ("svc.startd", 13, ServiceState.RUNNING),
        ]

    def test_duplicates_kept(self):
        """Test the same name from two lines produces two records."""
        lines = [
            "legacy_run     23:56:49 lrc:/etc/rc2_d/S47pppd",
            "legacy_run     23:56:50 lrc:/etc/rc3_d/S47pppd",
        ]

        assert len(parse_service_lines(lines, ["S47pppd"])) == 2


class TestLegacyServices:
    """Tests for the legacy init script directory."""

    def test_lists_directory(self, tmp_path):
        """Test every file under the directory is a candidate name."""
        (tmp_path / "nfs.server").write_text("")
        (tmp_path / "sendmail").write_text("")

        assert sorted(legacy_service_names(str(tmp_path))) == ["nfs.server", "sendmail"]

    def test_missing_directory(self, tmp_path):
        """Test a missing directory contributes nothing."""
        assert legacy_service_names(str(tmp_path / "absent")) == []
        assert list_directory(str(tmp_path / "absent")) is None

    def test_file_instead_of_directory(self, tmp_path):
        path = tmp_path / "init.d"
        path.write_text("")

        assert legacy_service_names(str(path)) == []


class TestServiceInventory:
    """Tests for ServiceInventory."""

    def test_list_services(self):
        """Test the live listing and the legacy directory are merged."""
        source = FakeCommandSource({"svcs -p": SVCS_OUTPUT})
        config = InventoryConfig(legacy_service_dir="/legacy")
        seen = []

        def lister(path):
            seen.append(path)
            return ["S47pppd"]

        services = ServiceInventory(source, config, lister).list_services()

        assert seen == ["/legacy"]
        assert source.calls == ["svcs -p"]
        assert services[0] == ServiceRecord("S47pppd", 0, ServiceState.STOPPED)
        assert ServiceRecord("svc.startd", 13, ServiceState.RUNNING) in services

    def test_no_service_manager(self):
        """Test a missing svcs command yields an empty list."""
        source = FakeCommandSource()

        assert ServiceInventory(source, lister=lambda path: None).list_services() == []
