from pathlib import Path

import click

from options_deployment.constants import DEFAULT_CONFIG_FILEPATH
from options_deployment.types import ChecksumAddress

config_option = click.option(
    "--config-filepath",
    "-c",
    help="Path to the JSON deployment config.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_CONFIG_FILEPATH,
    show_default=True,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Verify deployed contracts on the block explorer.",
    default=False,
    show_default=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

proxy_option = click.option(
    "--proxy",
    "-p",
    help="Address of the OptionsToken proxy.",
    type=ChecksumAddress(),
    required=False,
)

implementation_option = click.option(
    "--implementation",
    "-i",
    help="Address of the new implementation contract.",
    type=ChecksumAddress(),
    required=True,
)
