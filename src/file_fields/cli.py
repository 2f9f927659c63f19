# cli.py
import logging

import click

from file_fields.errors import InvalidSizeError
from file_fields.placement import extension_of
from file_fields.rules import UploadRules
from file_fields.settings import get_settings
from file_fields.sizes import parse_size

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """Inspect upload storage configuration and rules"""
    logging.basicConfig(level=get_settings().log_level)


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Data Directory: {settings.data_dir}")
    print(f"  Directory Mode: {oct(settings.dir_mode)}")
    print(f"  Upload Max Filesize: {settings.upload_max_filesize}")
    print(f"  Log Level: {settings.log_level}")


@cli.command(name="parse-size")
@click.argument("value")
def parse_size_cmd(value):
    """Convert a size expression such as 2M or 500K to bytes"""
    try:
        print(parse_size(value))
    except InvalidSizeError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")


@cli.command()
@click.argument("filename")
@click.option("--allow", "allowed", multiple=True, help="Allowed extension (repeatable)")
@click.option("--deny", "denied", multiple=True, help="Denied extension (repeatable)")
def check_extension(filename, allowed, denied):
    """Check whether FILENAME passes the given extension rules"""
    rules = UploadRules()
    if allowed:
        rules.set_extensions("file", allowed)
    if denied:
        rules.set_bad_extensions("file", denied)

    extension = rules.extension_is_ok("file", extension_of(filename))
    if extension is None:
        print(f"❌ {filename} rejected")
        raise SystemExit(1)
    print(f"✅ {filename} accepted as '{extension}'")


if __name__ == "__main__":
    cli()
