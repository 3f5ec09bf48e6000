"""Command-line interface for metricore configuration files."""

import json
import logging
import sys
from pathlib import Path

import click
import yaml

from metricore import __version__
from metricore.config import MetricsConfig, ReservoirConfig, validate_config_file

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@click.group()
@click.version_option(version=__version__, prog_name="metricore")
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Logging level"
)
def cli(log_level: str):
    """metricore: in-process metrics engine tooling."""
    logging.getLogger().setLevel(getattr(logging, log_level))


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate(config_file: str):
    """Validate a metrics configuration file (YAML or JSON)."""
    click.echo(f"Validating configuration: {config_file}")

    is_valid, errors, config = validate_config_file(config_file)

    if is_valid:
        click.echo(click.style("✓ Configuration is valid", fg="green"))
        click.echo(f"Default context: {config.default_context_label}")
        click.echo(
            f"Reservoir: {config.reservoir.type} "
            f"(sample_size={config.reservoir.sample_size}, alpha={config.reservoir.alpha})"
        )
    else:
        click.echo(click.style(f"✗ Configuration has {len(errors)} errors:", fg="red"))
        for i, error in enumerate(errors[:20], 1):
            click.echo(f"  {i}. {error}")
        if len(errors) > 20:
            click.echo(f"  ... and {len(errors) - 20} more errors")

    sys.exit(0 if is_valid else 1)


@cli.command()
@click.option(
    "--output", "-o", default="metrics_config.yaml",
    help="Output file path"
)
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
@click.option(
    "--reservoir", "-r",
    type=click.Choice(["uniform", "forward_decaying", "sliding_window"]),
    default="forward_decaying",
    help="Default reservoir strategy"
)
def generate_config(output: str, format: str, reservoir: str):
    """Generate an example metrics configuration file."""
    example_config = MetricsConfig(
        default_context_label="Application",
        global_tags={"env": "dev"},
        reservoir=ReservoirConfig(type=reservoir),
    )

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        if format == "yaml":
            yaml.dump({"metrics": example_config.to_dict()}, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump({"metrics": example_config.to_dict()}, f, indent=2)

    click.echo(f"Generated example configuration at {output_path}")


if __name__ == "__main__":
    cli()
