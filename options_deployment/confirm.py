import typing
from typing import Any

from ape.utils import ZERO_ADDRESS


def _confirm(prompt: str) -> None:
    """Aborts the process unless the user answers anything but N."""
    answer = input(f"{prompt} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        exit(-1)


def _continue() -> None:
    """Asks the user to continue."""
    _confirm("Continue")


def _contains_zero_address(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return any(_contains_zero_address(v) for v in value)
    return value == ZERO_ADDRESS


def _confirm_resolution(named_args: typing.Dict[str, Any], contract_name: str) -> None:
    """Asks the user to confirm the arguments used to deploy or initialize a contract."""
    if not named_args:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _confirm(f"Deploy {contract_name}")
        return

    print(f"\nParameters for {contract_name}")
    for name, value in named_args.items():
        print(f"\t{name}={value}")
    _confirm(f"Deploy {contract_name}")
    if _contains_zero_address(list(named_args.values())):
        _confirm("Zero Address detected for deployment parameter; Continue")
