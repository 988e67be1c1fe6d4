"""
cmdletskel: A small library to generate the skeleton of a PowerShell advanced function
from a name and a mapping of parameter name to type/attribute specification.

Public API:
- new_function(name: str, parameters: Mapping[str, str | list | dict] = None, ...) -> str | None
- normalize_parameter(name: str, value) -> ParameterAttributes
- render_parameter_block(records) -> tuple[str, str]
- compose_scaffold(name: str, records, ...) -> str
- parse_params(param_args: list[str]) -> dict[str, str | list[str]]
- load_request(path: str) -> ScaffoldRequest
- save_request(request: ScaffoldRequest, output_path: str) -> None

The generator supports:
- Parameter entries given as a bare type ("string[]"), as a list
  [type, mandatory, fromPipeline, fromPipelineByPropertyName, position] with trailing
  items optional, or as a mapping with the same fields.
- Only attributes that were supplied are rendered; an explicit false is still rendered.
- Comment-based help with one .PARAMETER stub per parameter, in declaration order.
- Begin/Process/End blocks with caller code spliced in verbatim.
- Handing the result to a delivery sink (an editor integration, a file) instead of returning it.
"""
from .generator import (
    FileSink,
    InvalidInputTypeError,
    InvalidSpecError,
    ParameterAttributes,
    ScaffoldError,
    compose_scaffold,
    environment_author,
    new_function,
    normalize_parameter,
    render_parameter_block,
)
from .request import ScaffoldRequest, load_request, parse_params, save_request

__all__ = [
    "FileSink",
    "InvalidInputTypeError",
    "InvalidSpecError",
    "ParameterAttributes",
    "ScaffoldError",
    "ScaffoldRequest",
    "compose_scaffold",
    "environment_author",
    "load_request",
    "new_function",
    "normalize_parameter",
    "parse_params",
    "render_parameter_block",
    "save_request",
]
