#!/usr/bin/env python3
import argparse
import sys
from typing import List

from cmdletskel_lib import FileSink, ScaffoldRequest, load_request, parse_params, save_request


def _read_snippet(value: str) -> str:
    # @path reads the snippet from a file
    if value.startswith("@"):
        with open(value[1:], "r", encoding="utf-8") as f:
            return f.read().rstrip("\n")
    return value


def _build_request(args: argparse.Namespace) -> ScaffoldRequest:
    request = load_request(args.request) if args.request else ScaffoldRequest()
    if args.name:
        request.name = args.name
    request.parameters.update(parse_params(args.param))
    if args.confirm:
        request.should_support_confirmation = True
    for attr in ("synopsis", "description", "requires_version", "author"):
        value = getattr(args, attr)
        if value is not None:
            setattr(request, attr, value)
    for attr in ("begin", "process", "end"):
        value = getattr(args, attr)
        if value is not None:
            setattr(request, f"{attr}_code", _read_snippet(value))
    if not request.name:
        raise ValueError("A function name is required (positional NAME or 'name' in the request file)")
    return request


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Generate the skeleton of a PowerShell advanced function from a parameter specification."
        )
    )
    parser.add_argument("name", nargs="?", help="Function name, e.g. Set-MyScript")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        help=(
            "Parameter specification. Repeatable. Accepts Name=type or "
            "Name=type,mandatory,fromPipeline,fromPipelineByPropertyName,position with trailing "
            "items optional. Example: -p Name=string[],true,true,false,0 -p Recurse=switch"
        ),
    )
    parser.add_argument(
        "-r",
        "--request",
        help="YAML request file with name, parameters, synopsis, description, begin, process, end, confirm",
    )
    parser.add_argument("--synopsis", help="Text for the .SYNOPSIS section")
    parser.add_argument("--description", help="Text for the .DESCRIPTION section")
    parser.add_argument("--begin", help="Code for the Begin block (@file reads it from a file)")
    parser.add_argument("--process", help="Code for the Process block (@file reads it from a file)")
    parser.add_argument("--end", help="Code for the End block (@file reads it from a file)")
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Generate SupportsShouldProcess=$true so the function supports -WhatIf/-Confirm",
    )
    parser.add_argument("--requires-version", help="Minimum PowerShell version (default: 2.0)")
    parser.add_argument("--author", help="Author for the .NOTES section (default: current user)")
    parser.add_argument("-o", "--out", help="Write the scaffold to this file instead of stdout")
    parser.add_argument(
        "--save-request",
        help="Also write the effective request as YAML, usable later with --request",
    )

    args = parser.parse_args(argv)

    try:
        request = _build_request(args)
    except OSError as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error parsing parameters: {e}", file=sys.stderr)
        return 2

    sink = FileSink(args.out) if args.out else None
    try:
        text = request.render(deliver_to_editor=sink is not None, editor_sink=sink)
        if args.save_request:
            save_request(request, args.save_request)
    except Exception as e:
        print(f"Generation failed: {e}", file=sys.stderr)
        return 1

    if text is not None:
        sys.stdout.write(text)
    else:
        print(f"Generation completed. Output at: {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
