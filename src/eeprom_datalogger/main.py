"""
Main entry point for the EEPROM data logger command line.

Each invocation is one logger session: the field selection starts from
the settings file, is adjusted by flags, and the header and title pages
are written the first time a record is logged.

Usage:
    eeprom-logger --image logger.bin log --temperature 21.5 --humidity 40
    eeprom-logger --image logger.bin send
    eeprom-logger --i2c-bus 1 erase --yes
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from eeprom_datalogger import __version__
from eeprom_datalogger.core import datalogger
from eeprom_datalogger.core.datalogger import LoggerState
from eeprom_datalogger.core.geometry import (
    COUNTER_PAGE,
    DATA_PAGE_COUNT,
    FIRST_DATA_PAGE,
    HEADER_PAGE,
    INFO_PAGE,
    TITLES_PAGE,
)
from eeprom_datalogger.core.metadata import read_persisted_entry_count
from eeprom_datalogger.core.page_io import decode_page, is_blank
from eeprom_datalogger.core.record import Separator
from eeprom_datalogger.core.settings import Backend, Settings
from eeprom_datalogger.hardware import EepromError
from eeprom_datalogger.hardware.serial_link import SerialLink, StreamLink
from eeprom_datalogger.sensors import PressureUnit, TemperatureUnit
from eeprom_datalogger.sensors.manual import ManualSensorSource
from eeprom_datalogger.utils import (
    DeviceContext,
    describe_error,
    is_fatal_error,
    is_retryable_error,
    setup_logging,
)

logger = logging.getLogger(__name__)

FIELD_FLAGS = ("date", "time", "temperature", "pressure", "humidity", "iaq", "eco2", "light")


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Build the eeprom-logger argument parser."""
    parser = argparse.ArgumentParser(
        prog="eeprom-logger",
        description="Circular EEPROM data logger for the Kitronik Air Quality board",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    backend = parser.add_mutually_exclusive_group()
    backend.add_argument("--image", type=Path, metavar="PATH",
                         help="use an EEPROM image file")
    backend.add_argument("--i2c-bus", type=int, metavar="N",
                         help="use a CAT24M01 on /dev/i2c-N")

    parser.add_argument("--log-file", metavar="PATH", help="write a debug log")
    parser.add_argument("-v", "--verbose", action="store_true", help="show info messages")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("info", help="show geometry, counter and metadata pages")

    log = commands.add_parser("log", help="log one record (or several)")
    log.add_argument("--temperature", type=float, default=0, help="degrees C")
    log.add_argument("--pressure", type=float, default=0, help="Pascals")
    log.add_argument("--humidity", type=float, default=0, help="percent")
    log.add_argument("--iaq", type=float, default=0, help="IAQ score")
    log.add_argument("--eco2", type=float, default=0, help="ppm")
    log.add_argument("--light", type=float, default=0, help="light level")
    log.add_argument("--date", help="DD/MM/YY (default: host clock)")
    log.add_argument("--time", help="HH:MM:SS (default: host clock)")
    for name in FIELD_FLAGS:
        log.add_argument(f"--no-{name}", dest=f"exclude_{name}", action="store_true",
                         help=f"leave {name} out of the record")
    log.add_argument("--fahrenheit", action="store_true", help="log temperature in F")
    log.add_argument("--mbar", action="store_true", help="log pressure in mBar")
    log.add_argument("--separator", choices=[s.name.lower() for s in Separator],
                     help="value separator")
    log.add_argument("--repeat", type=int, default=1, metavar="N",
                     help="number of records to log")
    log.add_argument("--interval", type=float, default=0.0, metavar="SECONDS",
                     help="pause between records")

    info = commands.add_parser("project-info", help="write name and subject")
    info.add_argument("name")
    info.add_argument("subject")

    erase = commands.add_parser("erase", help="blank every page")
    erase.add_argument("--yes", action="store_true", help="do not ask for confirmation")

    send = commands.add_parser(
        "send", help="transmit all stored data",
        description="Transmit header, project info, titles and the stored records. "
                    "Each run is a new session, so a store that wrapped in an earlier "
                    "run only sends the records logged since the wrap.",
    )
    send.add_argument("--port", help="serial port (default: settings, then stdout)")
    send.add_argument("--baudrate", type=int, help="serial baud rate")

    dump = commands.add_parser("dump-page", help="show one raw page")
    dump.add_argument("page", type=int)

    return parser


def _device_context(args, settings: Settings) -> DeviceContext:
    if args.image is not None:
        context = DeviceContext.from_settings(settings.device)
        context.backend = Backend.IMAGE
        context.image_path = args.image
        return context

    if args.i2c_bus is not None:
        context = DeviceContext.from_settings(settings.device)
        context.backend = Backend.I2C
        context.i2c_bus = args.i2c_bus
        return context

    return DeviceContext.from_settings(settings.device)


def _new_state(settings: Settings) -> LoggerState:
    return LoggerState(selection=settings.fields.to_selection())


# =============================================================================
# Commands
# =============================================================================

def cmd_info(args, device, settings: Settings, console: Console) -> None:
    count, present = read_persisted_entry_count(device)

    table = Table(title="EEPROM data logger")
    table.add_column("Item")
    table.add_column("Value")
    table.add_row("Device", device.describe())
    table.add_row("Geometry", str(device.geometry))
    table.add_row("Entry counter",
                  f"{count} (page {FIRST_DATA_PAGE + count} next)" if present else "not set")

    for label, page in (("Header", HEADER_PAGE), ("Project info", INFO_PAGE),
                        ("Titles", TITLES_PAGE)):
        raw = device.read_page(page)
        text = "<blank>" if is_blank(raw) else repr(decode_page(raw))
        table.add_row(f"{label} (page {page})", Text(text))

    console.print(table)


def cmd_log(args, device, settings: Settings, console: Console) -> None:
    state = _new_state(settings)

    temperature_unit = TemperatureUnit.F if args.fahrenheit else state.selection.temperature_unit
    pressure_unit = PressureUnit.MBAR if args.mbar else state.selection.pressure_unit

    if args.exclude_date:
        datalogger.include_date(state, False)
    if args.exclude_time:
        datalogger.include_time(state, False)
    datalogger.include_temperature(state, temperature_unit,
                                   state.selection.temperature and not args.exclude_temperature)
    datalogger.include_pressure(state, pressure_unit,
                                state.selection.pressure and not args.exclude_pressure)
    if args.exclude_humidity:
        datalogger.include_humidity(state, False)
    if args.exclude_iaq:
        datalogger.include_iaq(state, False)
    if args.exclude_eco2:
        datalogger.include_co2(state, False)
    if args.exclude_light:
        datalogger.include_light(state, False)
    if args.separator:
        datalogger.select_separator(state, Separator[args.separator.upper()])

    sensors = ManualSensorSource(
        temperature=args.temperature,
        pressure=args.pressure,
        humidity=args.humidity,
        iaq_score=args.iaq,
        eco2=args.eco2,
        light=args.light,
        date=args.date,
        time=args.time,
    )

    for index in range(args.repeat):
        if index and args.interval > 0:
            time.sleep(args.interval)
        page = datalogger.log_data(state, device, sensors)
        console.print(f"Logged record to page {page}")

    if state.cursor.full:
        console.print(f"[yellow]Data area wrapped; oldest of {DATA_PAGE_COUNT} records overwritten[/yellow]")


def cmd_project_info(args, device, settings: Settings, console: Console) -> None:
    state = _new_state(settings)
    datalogger.add_project_info(state, device, args.name, args.subject)
    console.print(f"Project info written to page {INFO_PAGE}")


def cmd_erase(args, device, settings: Settings, console: Console) -> None:
    if not args.yes and not Confirm.ask(
        f"Erase all data on {device.describe()}?", console=console
    ):
        console.print("Erase cancelled")
        return

    state = _new_state(settings)
    datalogger.erase_data(state, device)
    console.print("[green]Erase complete[/green]")


def cmd_send(args, device, settings: Settings, console: Console) -> None:
    state = _new_state(settings)
    port = args.port or settings.serial.port

    if port:
        link = SerialLink(port, baudrate=args.baudrate or settings.serial.baudrate,
                          timeout=settings.serial.timeout)
    else:
        link = StreamLink(sys.stdout, name="stdout")

    try:
        records = datalogger.send_all_data(state, device, link)
    finally:
        link.close()

    if port:
        console.print(f"Sent {records} records to {link.describe()}")
    if records < DATA_PAGE_COUNT:
        console.print(
            f"[yellow]Sent the {records} records counted since the last wrap or erase; "
            f"records wrapped in an earlier session are not included[/yellow]"
        )


def cmd_dump_page(args, device, settings: Settings, console: Console) -> None:
    raw = device.read_page(args.page)

    for offset in range(0, len(raw), 16):
        chunk = raw[offset:offset + 16]
        console.print(f"{offset:04X}  {chunk.hex(' ')}", highlight=False)

    if args.page == COUNTER_PAGE:
        count, present = read_persisted_entry_count(device)
        console.print(f"Entry counter: {count if present else 'not set'}")
    elif is_blank(raw):
        console.print("<blank>")
    else:
        console.print(repr(decode_page(raw)), highlight=False, markup=False)


COMMANDS = {
    "info": cmd_info,
    "log": cmd_log,
    "project-info": cmd_project_info,
    "erase": cmd_erase,
    "send": cmd_send,
    "dump-page": cmd_dump_page,
}


# =============================================================================
# Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for eeprom-logger.

    Returns:
        Process exit code (0 on success, 1 on a logger error, 130 on Ctrl-C)
    """
    args = build_parser().parse_args(argv)
    console = Console(stderr=True)

    setup_logging(args.log_file, console_level=logging.INFO if args.verbose else logging.WARNING)

    settings = Settings.instance()

    try:
        with _device_context(args, settings) as device:
            COMMANDS[args.command](args, device, settings, console)
    except (EepromError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error:[/red] {escape(describe_error(e))}")
        if is_retryable_error(e):
            console.print("The bus error may be transient; run the command again")
        elif is_fatal_error(e):
            console.print("Retrying will not help until the device or arguments are fixed")
        return 1
    except KeyboardInterrupt:
        console.print("Interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
