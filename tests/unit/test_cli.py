"""Tests for the command line front end (temp SQLite store)."""
import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from freelance_crm import cli
from freelance_crm.common.config import reload_config
from freelance_crm.modules.controlling.cli import main as dashboard_main
from freelance_crm.modules.crm.cli import main as crm_main
from freelance_crm.modules.reporting.cli import main as export_main


def run(main, argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def add_client(capsys, *extra):
    code = run(crm_main, ["clients", "add", "--name", "Ann Lee", "--email", "ann@x.io", *extra])
    assert code == 0
    out = capsys.readouterr().out
    return out.strip().splitlines()[-1].split()[0]


def add_project(capsys, client_id, title, *extra):
    code = run(crm_main, ["projects", "add", "--client", client_id, "--title", title, *extra])
    assert code == 0
    out = capsys.readouterr().out
    return out.strip().splitlines()[-1].split()[0]


class TestClients:

    def test_add_and_list(self, isolated_config, capsys):
        add_client(capsys, "--company", "Lee Studio", "--tag", "VIP")
        assert run(crm_main, ["clients", "list"]) == 0
        out = capsys.readouterr().out
        assert "Clients (1 of 1)" in out
        assert "Ann Lee" in out
        assert "Tags: vip" in out

    def test_add_prints_notification(self, isolated_config, capsys):
        run(crm_main, ["clients", "add", "--name", "Ann Lee", "--email", "ann@x.io"])
        assert "✅ Client created" in capsys.readouterr().out

    def test_invalid_email_exits_non_zero(self, isolated_config, capsys):
        code = run(crm_main, ["clients", "add", "--name", "Ann Lee", "--email", "nope"])
        assert code == 1
        assert "email" in capsys.readouterr().err

    def test_search_and_tag_filter(self, isolated_config, capsys):
        add_client(capsys, "--tag", "vip")
        run(crm_main, ["clients", "add", "--name", "Bob Stone", "--email", "bob@x.io"])
        capsys.readouterr()
        run(crm_main, ["clients", "list", "--tag", "vip"])
        out = capsys.readouterr().out
        assert "Clients (1 of 2)" in out
        assert "Bob Stone" not in out

    def test_update_keeps_other_fields(self, isolated_config, capsys):
        client_id = add_client(capsys, "--company", "Lee Studio")
        assert run(crm_main, ["clients", "update", client_id, "--phone", "555"]) == 0
        capsys.readouterr()
        run(crm_main, ["clients", "show", client_id])
        out = capsys.readouterr().out
        assert "Lee Studio" in out
        assert "555" in out

    def test_delete_missing(self, isolated_config, capsys):
        assert run(crm_main, ["clients", "delete", "nope"]) == 1
        assert "Failed to delete client" in capsys.readouterr().err


class TestProjects:

    def test_add_list_and_status_filter(self, isolated_config, capsys):
        client_id = add_client(capsys)
        add_project(capsys, client_id, "Store redesign", "--price", "1200", "--status", "ongoing")
        add_project(capsys, client_id, "Logo refresh", "--price", "300")
        run(crm_main, ["projects", "list", "--status", "ongoing"])
        out = capsys.readouterr().out
        assert "Projects (1 of 2)" in out
        assert "Store redesign" in out
        assert "$1,200" in out

    def test_update_status(self, isolated_config, capsys):
        client_id = add_client(capsys)
        project_id = add_project(capsys, client_id, "Store redesign")
        assert run(crm_main, ["projects", "update", project_id, "--status", "completed"]) == 0
        capsys.readouterr()
        run(crm_main, ["projects", "list", "--status", "completed"])
        assert "Store redesign" in capsys.readouterr().out

    def test_negative_price_rejected(self, isolated_config, capsys):
        client_id = add_client(capsys)
        code = run(crm_main, ["projects", "add", "--client", client_id, "--title", "Store", "--price", "-1"])
        assert code == 1


class TestDashboardAndExport:

    def test_dashboard_json(self, isolated_config, capsys):
        client_id = add_client(capsys)
        add_project(capsys, client_id, "Store redesign", "--price", "1200.50")
        dashboard_main(["--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["portfolio"]["total_revenue"] == "1200.5"
        assert data["status_breakdown"] == {"pending": 1, "ongoing": 0, "completed": 0}
        assert data["revenue_by_client"][0]["label"] == "Ann"
        assert data["recent_projects"][0]["title"] == "Store redesign"

    def test_dashboard_text(self, isolated_config, capsys):
        dashboard_main([])
        out = capsys.readouterr().out
        assert "Clients:          0" in out

    def test_dashboard_time_in_profile_timezone(self, isolated_config, capsys, monkeypatch):
        monkeypatch.setenv("CONFIG__PROFILE__TIMEZONE", "Asia/Kathmandu")
        reload_config()
        dashboard_main(["--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["generated_at"].endswith("+05:45")

    def test_export_report(self, isolated_config, capsys, tmp_path):
        add_client(capsys)
        export_main(["report", "--output-dir", str(tmp_path / "out")])
        out = capsys.readouterr().out
        assert "Report exported" in out
        files = list((tmp_path / "out").iterdir())
        assert len(files) == 1
        assert files[0].name.startswith("report-")

    def test_export_uses_configured_dir(self, isolated_config, capsys):
        export_main(["clients"])
        out_dir = isolated_config.export.output_dir
        assert "Clients exported to CSV" in capsys.readouterr().out
        assert any(p.suffix == ".csv" for p in Path(out_dir).iterdir())


class TestDispatch:

    def test_routes_to_module(self, isolated_config, capsys):
        with patch.object(sys, "argv", ["freelance-crm", "clients", "list"]):
            with pytest.raises(SystemExit) as exc:
                cli.main()
        assert exc.value.code == 0
        assert "Clients (0 of 0)" in capsys.readouterr().out

    def test_unknown_module(self, capsys):
        with patch.object(sys, "argv", ["freelance-crm", "invoices"]):
            with pytest.raises(SystemExit) as exc:
                cli.main()
        assert exc.value.code == 2
