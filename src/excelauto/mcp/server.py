from __future__ import annotations

import argparse
import functools
import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Literal, cast

import anyio
from pydantic import BaseModel, Field

from .backend import CellBackendName
from .io import PathPolicy
from .session import WorkbookSession
from .shared.output_path import OnConflictPolicy
from .sheet_ops import JsonScalar
from .tools import (
    CreateXlsxToolInput,
    CreateXlsxToolOutput,
    GetRangeToolInput,
    GetRangeToolOutput,
    OpenExcelToolInput,
    OpenExcelToolOutput,
    SetCellsToolInput,
    SetCellsToolOutput,
    SetRangeToolInput,
    SetRangeToolOutput,
    run_create_xlsx_tool,
    run_get_range_tool,
    run_open_excel_tool,
    run_set_cells_tool,
    run_set_range_tool,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.server.fastmcp import FastMCP

logger = logging.getLogger(__name__)

Transport = Literal["stdio", "sse", "streamable-http"]


class ServerConfig(BaseModel):
    """Configuration for the MCP server process."""

    root: Path | None = Field(
        default=None, description="Root directory for file access."
    )
    deny_globs: list[str] = Field(default_factory=list, description="Denied glob list.")
    log_level: str = Field(default="INFO", description="Logging level.")
    log_file: Path | None = Field(default=None, description="Optional log file path.")
    backend: CellBackendName = Field(
        default="auto", description="Engine used for cell instructions."
    )
    on_conflict: OnConflictPolicy = Field(
        default="overwrite", description="Workbook creation conflict policy."
    )
    auto_formula: bool = Field(
        default=False, description="Write text starting with '=' as formulas."
    )
    transport: Transport = Field(default="stdio", description="MCP transport.")
    host: str = Field(default="localhost", description="Bind host for HTTP transports.")
    port: int = Field(default=8888, ge=1, le=65535, description="Bind port.")


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server entrypoint.

    Args:
        argv: Optional CLI arguments for testing.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    config = _parse_args(argv)
    _configure_logging(config)
    try:
        run_server(config)
    except Exception as exc:  # pragma: no cover - surface runtime errors
        logger.error("MCP server failed: %s", exc)
        return 1
    return 0


def run_server(config: ServerConfig) -> None:
    """Start the MCP server.

    Args:
        config: Server configuration.
    """
    _import_mcp()
    policy = PathPolicy(root=config.root, deny_globs=config.deny_globs)
    root = policy.normalize_root()
    if root is None:
        logger.info("MCP root: <none> (absolute paths required)")
    else:
        logger.info("MCP root: %s", root)
    session = WorkbookSession()
    app = _create_app(policy, session, config)
    logger.info(
        "Starting ExcelAuto MCP server (transport=%s, backend=%s).",
        config.transport,
        config.backend,
    )
    app.run(transport=config.transport)


def _parse_args(argv: list[str] | None) -> ServerConfig:
    """Parse CLI arguments into server config.

    Args:
        argv: Optional CLI argument list.

    Returns:
        Parsed server configuration.
    """
    parser = argparse.ArgumentParser(description="ExcelAuto MCP server.")
    parser.add_argument("--root", type=Path, help="Workspace root.")
    parser.add_argument(
        "--deny-glob",
        action="append",
        default=[],
        help="Glob pattern to deny (can be specified multiple times).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument("--log-file", type=Path, help="Optional log file path.")
    parser.add_argument(
        "--backend",
        choices=["auto", "com", "openpyxl"],
        default="auto",
        help="Engine for set_cells_by_array (auto/com/openpyxl).",
    )
    parser.add_argument(
        "--on-conflict",
        choices=["overwrite", "skip", "rename"],
        default="overwrite",
        help="Conflict policy when creating an existing workbook.",
    )
    parser.add_argument(
        "--auto-formula",
        action="store_true",
        help="Write text starting with '=' as formulas instead of literal text.",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="MCP transport.",
    )
    parser.add_argument("--host", default="localhost", help="HTTP bind host.")
    parser.add_argument("--port", type=int, default=8888, help="HTTP bind port.")
    args = parser.parse_args(argv)
    return ServerConfig(
        root=args.root,
        deny_globs=list(args.deny_glob),
        log_level=args.log_level,
        log_file=args.log_file,
        backend=args.backend,
        on_conflict=args.on_conflict,
        auto_formula=bool(args.auto_formula),
        transport=args.transport,
        host=args.host,
        port=args.port,
    )


def _configure_logging(config: ServerConfig) -> None:
    """Configure logging for the server process.

    Args:
        config: Server configuration.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file is not None:
        handlers.append(logging.FileHandler(config.log_file))
    logging.basicConfig(
        level=config.log_level.upper(),
        handlers=handlers,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _import_mcp() -> ModuleType:
    """Import the MCP SDK module or raise a helpful error.

    Returns:
        Imported MCP module.
    """
    try:
        return importlib.import_module("mcp")
    except ModuleNotFoundError as exc:
        raise RuntimeError(
            "MCP SDK is not installed. Install with `pip install excelauto[mcp]`."
        ) from exc


def _create_app(
    policy: PathPolicy, session: WorkbookSession, config: ServerConfig
) -> FastMCP:
    """Create the MCP FastMCP application.

    Args:
        policy: Path policy for filesystem access.
        session: Session holding the current workbook.
        config: Server configuration.

    Returns:
        FastMCP application instance.
    """
    from mcp.server.fastmcp import FastMCP

    app = FastMCP(
        "ExcelAuto MCP", json_response=True, host=config.host, port=config.port
    )
    _register_tools(
        app,
        policy,
        session,
        default_backend=config.backend,
        default_on_conflict=config.on_conflict,
        auto_formula=config.auto_formula,
    )
    return app


def _register_tools(
    app: FastMCP,
    policy: PathPolicy,
    session: WorkbookSession,
    *,
    default_backend: CellBackendName,
    default_on_conflict: OnConflictPolicy,
    auto_formula: bool,
) -> None:
    """Register MCP tools for the server.

    Args:
        app: FastMCP application instance.
        policy: Path policy for filesystem access.
        session: Session holding the current workbook.
        default_backend: Engine used when a call does not choose one.
        default_on_conflict: Conflict policy used when a call does not set one.
        auto_formula: Write text starting with '=' as formulas.
    """

    async def _open_excel_tool(file_path: str) -> OpenExcelToolOutput:
        """Open an Excel workbook and list its sheet names.

        The workbook becomes the current workbook for the range and cell
        tools.

        Args:
            file_path: Absolute path to the workbook (.xlsx/.xlsm).

        Returns:
            Resolved path and sheet names.
        """
        payload = OpenExcelToolInput(file_path=file_path)
        work = functools.partial(
            run_open_excel_tool, payload, session=session, policy=policy
        )
        result = cast(OpenExcelToolOutput, await anyio.to_thread.run_sync(work))
        return result

    open_tool = app.tool(name="open_excel_and_list_sheets")
    open_tool(_open_excel_tool)

    async def _get_range_tool(
        sheet_name: str,
        first_row: int,
        first_column: int,
        last_row: int,
        last_column: int,
        cell_with_coord: bool = False,
    ) -> GetRangeToolOutput:
        """Read a rectangular range from the current workbook.

        Args:
            sheet_name: Sheet to read.
            first_row: First row (1-based).
            first_column: First column (1-based).
            last_row: Last row (inclusive).
            last_column: Last column (inclusive).
            cell_with_coord: When true, return non-empty cells as
                'content@A1' strings instead of a 2D array.

        Returns:
            Range values or coordinate strings.
        """
        payload = GetRangeToolInput(
            sheet_name=sheet_name,
            first_row=first_row,
            first_column=first_column,
            last_row=last_row,
            last_column=last_column,
            cell_with_coord=cell_with_coord,
        )
        work = functools.partial(
            run_get_range_tool, payload, session=session, policy=policy
        )
        result = cast(GetRangeToolOutput, await anyio.to_thread.run_sync(work))
        return result

    get_range_tool = app.tool(name="get_sheet_range_content")
    get_range_tool(_get_range_tool)

    async def _set_range_tool(
        sheet_name: str,
        first_row: int,
        first_column: int,
        values: list[list[JsonScalar]],
    ) -> SetRangeToolOutput:
        """Write a 2D array of values into the current workbook.

        Args:
            sheet_name: Sheet to write.
            first_row: Row of the top-left cell (1-based).
            first_column: Column of the top-left cell (1-based).
            values: Rows of values. null clears a cell.

        Returns:
            Written range and cell count.
        """
        payload = SetRangeToolInput(
            sheet_name=sheet_name,
            first_row=first_row,
            first_column=first_column,
            values=values,
        )
        work = functools.partial(
            run_set_range_tool,
            payload,
            session=session,
            policy=policy,
            auto_formula=auto_formula,
        )
        result = cast(SetRangeToolOutput, await anyio.to_thread.run_sync(work))
        return result

    set_range_tool = app.tool(name="set_sheet_range_content")
    set_range_tool(_set_range_tool)

    async def _create_xlsx_tool(
        file_path: str, on_conflict: OnConflictPolicy | None = None
    ) -> CreateXlsxToolOutput:
        """Create an empty .xlsx workbook and make it current.

        Args:
            file_path: Absolute path of the new workbook.
            on_conflict: Policy when the file exists: 'overwrite', 'skip' or
                'rename'. Defaults to server --on-conflict setting.

        Returns:
            Created path, sheet names and warnings.
        """
        payload = CreateXlsxToolInput(file_path=file_path, on_conflict=on_conflict)
        work = functools.partial(
            run_create_xlsx_tool,
            payload,
            session=session,
            policy=policy,
            on_conflict=on_conflict or default_on_conflict,
        )
        result = cast(CreateXlsxToolOutput, await anyio.to_thread.run_sync(work))
        return result

    create_tool = app.tool(name="create_xlsx_file_by_absolute_path")
    create_tool(_create_xlsx_tool)

    async def _set_cells_tool(
        sheet_name: str,
        cells: list[str],
        backend: CellBackendName | None = None,
    ) -> SetCellsToolOutput:
        """Edit cells of the current workbook with instruction strings.

        Each instruction has the form 'content'@A1#style$fgcolor%bgcolor.
        Only the @address field is required. Style tokens: B/b bold on/off,
        I/i italic on/off, U/u underline on/off, ⬅ left, ↔ center,
        ➡ right. Colours are 6-digit hex (RRGGBB). Instructions without a
        valid address are skipped and reported.

        Args:
            sheet_name: Sheet to edit.
            cells: Instruction strings applied in order.
            backend: Engine override ('auto', 'com', 'openpyxl').
                Defaults to server --backend setting.

        Returns:
            Applied and skipped instructions with warnings.
        """
        payload = SetCellsToolInput(sheet_name=sheet_name, cells=cells, backend=backend)
        work = functools.partial(
            run_set_cells_tool,
            payload,
            session=session,
            policy=policy,
            backend=default_backend,
            auto_formula=auto_formula,
        )
        result = cast(SetCellsToolOutput, await anyio.to_thread.run_sync(work))
        return result

    set_cells_tool = app.tool(name="set_cells_by_array")
    set_cells_tool(_set_cells_tool)
