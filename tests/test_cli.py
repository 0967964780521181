"""Tests for the cbr-client CLI."""

import json
from unittest.mock import patch

import pytest
from cbr_client.cli import main
from cbr_client.exceptions import CBRValidationError
from cbr_client.models import BulkDeleteResult, DeleteOutcome, Rule, Zone, ZoneSpec


@pytest.fixture
def mock_client():
    """Patch the client used by CLI commands."""
    with patch("cbr_client.cli.CBRClient") as mock_cls:
        yield mock_cls.return_value


class TestCreateCommands:
    """Test suite for create-zone and create-rule."""

    def test_create_zone(self, mock_client, capsys):
        """Test create-zone passes repeated options as a spec."""
        mock_client.create_zone.return_value = "zone-1"

        exit_code = main(
            [
                "create-zone",
                "storage",
                "--address", "10.0.0.1",
                "--address", "10.0.0.0/24",
                "--service-ref", "kms",
            ]
        )

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "zone-1"
        mock_client.create_zone.assert_called_once_with(
            "storage",
            ZoneSpec(address=["10.0.0.1", "10.0.0.0/24"], service_ref=["kms"]),
        )

    def test_create_zone_from_file(self, mock_client, tmp_path):
        """Test file entries are merged with command line entries."""
        path = tmp_path / "zone.yaml"
        path.write_text("VPC:\n  - crn:vpc\nAddress:\n  - 10.0.0.1\n")
        mock_client.create_zone.return_value = "zone-1"

        exit_code = main(
            ["create-zone", "storage", "-f", str(path), "--address", "10.0.0.2"]
        )

        assert exit_code == 0
        spec = mock_client.create_zone.call_args.args[1]
        assert spec.vpc == ["crn:vpc"]
        assert spec.address == ["10.0.0.1", "10.0.0.2"]

    def test_create_zone_missing_file(self, mock_client, tmp_path, capsys):
        """Test a missing spec file exits with an error."""
        exit_code = main(["create-zone", "storage", "-f", str(tmp_path / "nope.yaml")])

        assert exit_code == 1
        assert "not found" in capsys.readouterr().err
        mock_client.create_zone.assert_not_called()

    def test_create_rule_target(self, mock_client, capsys):
        """Test --target resolves the service identifier."""
        mock_client.create_rule.return_value = "rule-1"

        exit_code = main(
            ["create-rule", "zone-1", "--target", "kubernetes", "--api-type", "cluster"]
        )

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "rule-1"
        mock_client.create_rule.assert_called_once_with(
            "zone-1", "containers-kubernetes", api_type="cluster"
        )

    def test_create_rule_service(self, mock_client):
        """Test --service passes the name through."""
        main(["create-rule", "zone-1", "--service", "is"])

        mock_client.create_rule.assert_called_once_with("zone-1", "is", api_type=None)

    def test_create_rule_api_error(self, mock_client, capsys):
        """Test API errors exit with code 1."""
        mock_client.create_rule.side_effect = CBRValidationError("bad zone", code=400)

        exit_code = main(["create-rule", "zone-1", "--target", "cos"])

        assert exit_code == 1
        assert "bad zone" in capsys.readouterr().err


class TestDeleteCommands:
    """Test suite for delete and cleanup."""

    def test_delete(self, mock_client):
        """Test delete passes both IDs."""
        exit_code = main(["delete", "--rule-id", "rule-1", "--zone-id", "zone-1"])

        assert exit_code == 0
        mock_client.delete_rule_zone.assert_called_once_with(
            rule_id="rule-1", zone_id="zone-1"
        )

    def test_cleanup_zones_json(self, mock_client, capsys):
        """Test cleanup prints a JSON summary."""
        mock_client.delete_zones_with_pattern.return_value = BulkDeleteResult(
            pattern="mypattern",
            listed_count=3,
            outcomes=[DeleteOutcome(id="zone-1", name="a-mypattern", deleted=True)],
        )

        exit_code = main(["cleanup", "zones", "--json"])

        assert exit_code == 0
        mock_client.delete_zones_with_pattern.assert_called_once_with("")
        data = json.loads(capsys.readouterr().out)
        assert data["deleted_ids"] == ["zone-1"]
        assert data["listed_count"] == 3

    def test_cleanup_rules_with_failure(self, mock_client, capsys):
        """Test cleanup exits with 1 when a delete failed."""
        mock_client.delete_rules_with_pattern.return_value = BulkDeleteResult(
            pattern="foo",
            listed_count=2,
            outcomes=[
                DeleteOutcome(id="rule-1", name="is-rule-foo", deleted=True),
                DeleteOutcome(id="rule-2", name="kms-rule-foo", error="boom"),
            ],
        )

        exit_code = main(["cleanup", "rules", "--match", "foo"])

        assert exit_code == 1
        mock_client.delete_rules_with_pattern.assert_called_once_with("foo")
        out = capsys.readouterr().out
        assert "deleted rule-1" in out
        assert "rule-2" in out


class TestListCommand:
    """Test suite for list."""

    def test_list_zones_json(self, mock_client, capsys):
        """Test listing zones as JSON."""
        mock_client.list_zones.return_value = [Zone(id="zone-1", name="a-mypattern")]

        exit_code = main(["list", "zones", "--json"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == [
            {"id": "zone-1", "name": "a-mypattern", "addresses": 0}
        ]

    def test_list_rules_text(self, mock_client, capsys):
        """Test listing rules as text."""
        mock_client.list_rules.return_value = [
            Rule(id="rule-1", description="is-rule-mypattern", enforcement_mode="enabled")
        ]

        exit_code = main(["list", "rules"])

        assert exit_code == 0
        assert "rule-1  is-rule-mypattern" in capsys.readouterr().out
