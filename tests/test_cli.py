"""
Tests for the GenerateClaims / VerifyClaims commands.
"""

import json

import pytest

import GenerateClaims
import VerifyClaims
from merkle_claims.config import DistributionConfig
from tests.conftest import ACCOUNT_A, ACCOUNT_B


@pytest.fixture
def config(tmp_path):
    return DistributionConfig(output_path=str(tmp_path / "data" / "merkle-result.json"))


class TestGenerateClaims:
    """Tests for the generate command."""

    def test_writes_record(self, tmp_path, config, balance_map, capsys):
        input_path = tmp_path / "balances.json"
        input_path.write_text(json.dumps(balance_map))

        assert GenerateClaims.run(str(input_path), config) == 0

        doc = json.loads(open(config.output_path, encoding="utf-8").read())
        assert len(doc["claims"]) == len(balance_map)
        out = capsys.readouterr().out
        assert doc["merkleRoot"] in out
        assert config.output_path in out

    def test_csv_input(self, tmp_path, config):
        input_path = tmp_path / "balances.csv"
        input_path.write_text(f"wallet,rewardTotal\n{ACCOUNT_A},100\n{ACCOUNT_B},101\n")

        assert GenerateClaims.run(str(input_path), config.with_unit("wei")) == 0
        doc = json.loads(open(config.output_path, encoding="utf-8").read())
        assert doc["tokenTotal"] == hex(201)

    def test_validation_errors_write_nothing(self, tmp_path, config, capsys):
        input_path = tmp_path / "balances.json"
        input_path.write_text(json.dumps({"0xbad": "1", ACCOUNT_A: "0"}))

        assert GenerateClaims.run(str(input_path), config) == 1
        err = capsys.readouterr().err
        assert "0xbad" in err
        assert ACCOUNT_A in err
        assert not (tmp_path / "data" / "merkle-result.json").exists()

    @pytest.mark.parametrize(
        "name,content",
        [
            ("balances.json", "{not json"),
            ("balances.json", "\"0x1234\""),
            ("balances.json", f'{{"{ACCOUNT_A}": "1", "{ACCOUNT_A}": "2"}}'),
            ("balances.csv", "address,amount\n"),
        ],
    )
    def test_malformed_input_reported(self, tmp_path, config, capsys, name, content):
        input_path = tmp_path / name
        input_path.write_text(content)

        assert GenerateClaims.run(str(input_path), config) == 1
        assert "nothing written" in capsys.readouterr().err
        assert not (tmp_path / "data" / "merkle-result.json").exists()

    def test_missing_input(self, tmp_path, config):
        assert GenerateClaims.run(str(tmp_path / "missing.json"), config) == 1

    @pytest.mark.parametrize("argv", [[], ["a", "b", "c"], ["in.json", "gwei"]])
    def test_usage_errors(self, argv):
        with pytest.raises(SystemExit) as exc:
            GenerateClaims.main(argv)
        assert exc.value.code == 2


class TestVerifyClaims:
    """Tests for the verify command."""

    def _generate(self, tmp_path, config, balances):
        input_path = tmp_path / "balances.json"
        input_path.write_text(json.dumps(balances))
        assert GenerateClaims.run(str(input_path), config) == 0
        return config.output_path

    def test_valid_record(self, tmp_path, config, balance_map, capsys):
        path = self._generate(tmp_path, config, balance_map)
        capsys.readouterr()

        with pytest.raises(SystemExit) as exc:
            VerifyClaims.main([path])
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert out.count("Verified proof for") == len(balance_map)
        assert "Root matches the one read from the JSON? True" in out

    def test_tampered_record(self, tmp_path, config, balance_map, capsys):
        path = self._generate(tmp_path, config, balance_map)
        doc = json.loads(open(path, encoding="utf-8").read())
        account = next(iter(doc["claims"]))
        doc["claims"][account]["amount"] = hex(int(doc["claims"][account]["amount"], 16) + 1)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(doc, f)
        capsys.readouterr()

        assert VerifyClaims.run(path) == 1
        captured = capsys.readouterr()
        assert f"Verification for {account} failed" in captured.out
        assert "Root matches the one read from the JSON? False" in captured.out
        assert "Failed validation" in captured.err

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"merkleRoot": "0x12"}))
        assert VerifyClaims.run(str(path)) == 1

    def test_missing_file(self, tmp_path):
        assert VerifyClaims.run(str(tmp_path / "nope.json")) == 1

    def test_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            VerifyClaims.main([])
        assert exc.value.code == 2
