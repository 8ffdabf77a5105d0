"""Config commands."""

import json
import sys

import rich_click as click
from pydantic import ValidationError
from rich.syntax import Syntax

from ..config import DEFAULT_CONFIG, get_config_path, load_config, save_config
from ..models.config import RichlinksConfig
from ._console import console, status_icon


@click.group()
def config():
    """Manage configuration."""
    pass


@config.command("show")
@click.option("--defaults", is_flag=True, help="Show built-in defaults instead of the merged config")
def config_show(defaults: bool):
    """Show current configuration."""
    cfg = DEFAULT_CONFIG if defaults else load_config()
    syntax = Syntax(json.dumps(cfg, indent=2), "json", theme="monokai")
    console.print(syntax)


@config.command("path")
def config_path():
    """Show configuration file path."""
    console.print(str(get_config_path()))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value (e.g., fetch.timeout_seconds 5)."""
    cfg = load_config()

    section, _, name = key.partition(".")
    if not isinstance(cfg.get(section), dict) or name not in cfg[section]:
        console.print(f"{status_icon(False)} Unknown setting: {key}")
        sys.exit(1)

    # Parse value (try as JSON, fall back to string)
    try:
        parsed_value = json.loads(value)
    except json.JSONDecodeError:
        parsed_value = value

    cfg[section][name] = parsed_value
    try:
        RichlinksConfig.model_validate(cfg)
    except ValidationError as e:
        first = e.errors()[0]
        console.print(f"{status_icon(False)} Invalid value for {key}: {first['msg']}")
        sys.exit(1)

    save_config(cfg)
    console.print(f"{status_icon(True)} Set {key} = {parsed_value}")


@config.command("reset")
def config_reset():
    """Restore the built-in defaults."""
    save_config(DEFAULT_CONFIG)
    console.print(f"{status_icon(True)} Configuration reset: {get_config_path()}")
