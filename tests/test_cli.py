"""CLI tests for cmdletskel.py."""

import pytest

from cmdletskel import main


@pytest.mark.unit
class TestCli:

    def test_writes_scaffold_to_stdout(self, capsys):
        code = main(
            [
                "Set-MyScript",
                "-p", "Name=string[],true,true,false,0",
                "-p", "Recurse=switch",
                "--author", "tester",
                "--confirm",
            ]
        )
        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("#requires -Version 2.0\n")
        assert "Function Set-MyScript" in out
        assert "[CmdletBinding(SupportsShouldProcess=$true)]" in out
        assert (
            "[Parameter(Position=0, Mandatory=$true, ValueFromPipeline=$true, "
            "ValueFromPipelineByPropertyName=$false)]"
        ) in out
        assert "[Parameter()]\n        [switch]$Recurse" in out

    def test_writes_scaffold_to_file(self, tmp_path, capsys):
        out_file = tmp_path / "Set-MyScript.ps1"
        code = main(["Set-MyScript", "--author", "tester", "-o", str(out_file)])
        assert code == 0
        assert out_file.read_text(encoding="utf-8").startswith("#requires")
        assert "Generation completed" in capsys.readouterr().out

    def test_snippet_from_file(self, tmp_path, capsys):
        snippet = tmp_path / "process.ps1"
        snippet.write_text("Get-ChildItem $Path\n", encoding="utf-8")
        code = main(["Get-Files", "-p", "Path=string", "--process", f"@{snippet}", "--author", "x"])
        assert code == 0
        assert '"Get-Files: Process"\n        Get-ChildItem $Path\n    }' in capsys.readouterr().out

    def test_request_file_with_overrides(self, tmp_path, capsys):
        request = tmp_path / "request.yaml"
        request.write_text(
            "name: Get-Thing\nsynopsis: From file.\nparameters:\n  Id: int\n",
            encoding="utf-8",
        )
        code = main(["-r", str(request), "-p", "Force=switch", "--synopsis", "From CLI.", "--author", "x"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Function Get-Thing" in out
        assert ".SYNOPSIS\n    From CLI.\n" in out
        assert out.index("[int]$Id") < out.index("[switch]$Force")

    def test_save_request(self, tmp_path, capsys):
        saved = tmp_path / "saved.yaml"
        code = main(["Get-Thing", "-p", "Id=int,true", "--author", "x", "--save-request", str(saved)])
        assert code == 0
        first = capsys.readouterr().out
        assert main(["-r", str(saved)]) == 0
        assert capsys.readouterr().out == first

    def test_missing_name(self, capsys):
        assert main([]) == 2
        assert "function name is required" in capsys.readouterr().err

    def test_missing_snippet_file(self, tmp_path, capsys):
        missing = tmp_path / "missing.ps1"
        assert main(["Get-Thing", "--begin", f"@{missing}", "--author", "x"]) == 1
        err = capsys.readouterr().err
        assert "Error reading input file" in err
        assert "missing.ps1" in err

    def test_bad_param_format(self, capsys):
        assert main(["Get-Thing", "-p", "Id"]) == 2
        assert "Invalid -p parameter format" in capsys.readouterr().err

    def test_invalid_spec(self, capsys):
        assert main(["Get-Thing", "-p", "Id=int,maybe", "--author", "x"]) == 1
        err = capsys.readouterr().err
        assert "Generation failed" in err
        assert "'Id'" in err
