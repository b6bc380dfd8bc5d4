"""Config commands -- view and modify global configuration.

Provides the ``storefront config`` group for reading, updating and
resetting :class:`~storefront.models.GlobalConfig` on disk.
"""

from __future__ import annotations

from typing import Any

import typer

from storefront.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration (files, env vars and flags applied).

    Example::

        storefront config show
        storefront --json config show
    """
    from storefront.commands import exit_on_error, resolve_from_context
    from storefront.config import get_config_dir

    with exit_on_error():
        config = resolve_from_context(ctx)
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


def _coerce(key: str, current: Any, value: str) -> Any:
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    if current is None and value.lower() in ("none", "null", ""):
        return None
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g. 'cache.ttl.products')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type and the result is
    validated before saving.

    Example::

        storefront config set base_url https://shop.example.com
        storefront config set errors.locale ru
        storefront config set cache.ttl.products 600000
    """
    from storefront.config import load_global_config, save_global_config
    from storefront.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    coerced = _coerce(key, target[final_key], value)
    if key == "errors.locale":
        from storefront.client.messages import available_locales, is_supported_locale

        if not is_supported_locale(coerced):
            error(f"Unsupported locale: {value} (choose from: {', '.join(available_locales())})")
            raise typer.Exit(code=2)
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults."""
    from storefront.config import save_global_config
    from storefront.models import GlobalConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
