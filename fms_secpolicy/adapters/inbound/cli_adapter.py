"""CLI Adapter - Command-line interface for the FMS security policy renderer."""
import sys

import click

from fms_secpolicy import __version__
from fms_secpolicy.adapters.outbound import (
    DEFAULT_OUTPUT_PATH,
    Boto3AWSClient,
    ConsoleLogger,
    JSONExporter,
    load_resources_file,
)
from fms_secpolicy.application.config_loader import load_config, load_default_config
from fms_secpolicy.application.policy_service import create_policy_service
from fms_secpolicy.domain.entities import PolicyConfig, PolicyRun
from fms_secpolicy.domain.value_objects import ConfigMode, ResourceType
from fms_secpolicy.ports.outbound import LoggerPort

config_option = click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Policy config YAML. Default: the packaged policy-variants.yaml.",
)
region_option = click.option(
    "--region",
    default=None,
    help="AWS region for discovery and FMS. Default: from the AWS environment.",
)
role_arn_option = click.option(
    "--role-arn",
    default=None,
    help="IAM role ARN to assume for cross-account access.",
)
verbose_option = click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (DEBUG level logging).",
)
quiet_option = click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress all output except errors.",
)


@click.group()
@click.version_option(version=__version__, prog_name="fms-secpolicy")
def cli() -> None:
    """
    FMS SecPolicy - Render AWS Firewall Manager WAFv2 policies from tags.

    Discovers tagged Application Load Balancers, selects rule groups for each
    one from a YAML rule table, and renders (or pushes) FMS policies.
    """
    pass


@cli.command()
@config_option
@click.option(
    "--discover",
    is_flag=True,
    help="Discover ALBs from AWS instead of reading --input.",
)
@click.option(
    "--input", "-i", "input_path",
    default="resources.json",
    show_default=True,
    help="Resources JSON file, used when --discover is not set.",
)
@click.option(
    "--output", "-o",
    default=DEFAULT_OUTPUT_PATH,
    show_default=True,
    help="Output file path for rendered policies.",
)
@click.option(
    "--stdout",
    is_flag=True,
    help="Write rendered policies to stdout instead of a file.",
)
@region_option
@role_arn_option
@verbose_option
@quiet_option
def render(
    config_path: str | None,
    discover: bool,
    input_path: str,
    output: str,
    stdout: bool,
    region: str | None,
    role_arn: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """
    Render FMS policies to a JSON file.

    Examples:

        # Render from a resources file
        fms-secpolicy render -i resources.json

        # Discover ALBs and render with a custom config
        fms-secpolicy render --discover --region us-west-2 -c policy-variants.yaml

        # Print to stdout
        fms-secpolicy render --stdout
    """
    if role_arn and not discover:
        raise click.UsageError("--role-arn requires --discover")

    logger = ConsoleLogger(level=_log_level(verbose, quiet))

    try:
        cfg = _load_cli_config(config_path, logger)
        service = create_policy_service(
            logger=logger,
            config=cfg,
            output=JSONExporter(),
            role_arn=role_arn,
            region=region,
        )

        if discover:
            resources = service.discover_resources(region)
        else:
            logger.info(f"Reading resources from {input_path}")
            resources = load_resources_file(input_path)
            logger.info(f"Loaded {len(resources)} resources from file")

        if not resources:
            logger.warning("No resources discovered or loaded; nothing to do")
            return

        policies = service.render(resources)
        actual_path = service.export_policies(policies, "stdout" if stdout else output)

        if not stdout and not quiet:
            click.echo(f"Rendered {len(policies)} policies to {actual_path}")

    except Exception as e:
        logger.error(f"Render failed: {e}", exception=e)
        sys.exit(1)


@cli.command()
@config_option
@region_option
@role_arn_option
@click.option(
    "--ou-id",
    envvar="OU_ID",
    default="",
    help="Organizational unit the account must belong to; also scopes the policies. [env: OU_ID]",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Log intended FMS changes without calling PutPolicy.",
)
@click.option(
    "--skip-ou-check",
    is_flag=True,
    help="Do not verify that the account belongs to --ou-id.",
)
@click.option(
    "--output", "-o",
    default=None,
    help="Also write rendered policies to this file.",
)
@verbose_option
@quiet_option
def apply(
    config_path: str | None,
    region: str | None,
    role_arn: str | None,
    ou_id: str,
    dry_run: bool,
    skip_ou_check: bool,
    output: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """
    Discover ALBs, render policies and create or update them in FMS.

    Examples:

        # Preview changes
        fms-secpolicy apply --dry-run --region us-west-2

        # Apply, scoped to an OU
        fms-secpolicy apply --ou-id ou-abcd-12345678
    """
    logger = ConsoleLogger(level=_log_level(verbose, quiet))

    try:
        cfg = _load_cli_config(config_path, logger)
        service = create_policy_service(
            logger=logger,
            config=cfg,
            output=JSONExporter(),
            role_arn=role_arn,
            region=region,
        )

        policy_run = service.run(
            region=region,
            ou_id=ou_id,
            dry_run=dry_run,
            check_ou=not skip_ou_check,
            output_path=output,
        )

        if not quiet:
            _print_summary(policy_run)

    except Exception as e:
        logger.error(f"Apply failed: {e}", exception=e)
        sys.exit(1)


@cli.command()
@config_option
def validate_config(config_path: str | None) -> None:
    """
    Validate a policy config and print what it contains.
    """
    logger = ConsoleLogger(level="ERROR")

    try:
        cfg = _load_cli_config(config_path, logger)
    except Exception as e:
        logger.error(f"Invalid config: {e}", exception=e)
        sys.exit(1)

    _print_config(cfg)


@cli.command()
@click.option(
    "--role-arn",
    default=None,
    help="IAM role ARN to assume (test assumed role identity).",
)
def whoami(role_arn: str | None) -> None:
    """
    Show the current AWS identity.

    Useful for verifying credentials before applying policies.
    """
    logger = ConsoleLogger(level="INFO")

    try:
        aws_client = Boto3AWSClient(logger=logger)

        if role_arn:
            aws_client = aws_client.assume_role(
                role_arn=role_arn,
                session_name="fms-secpolicy-test",
            )

        identity = aws_client.get_caller_identity()

        click.echo(f"Account: {identity['account']}")
        click.echo(f"ARN: {identity['arn']}")
        click.echo(f"User ID: {identity['user_id']}")

    except Exception as e:
        logger.error(f"Failed to get identity: {e}", exception=e)
        sys.exit(1)


@cli.command()
def list_resource_types() -> None:
    """
    List all supported resource types.

    Shows the resourceDefaults keys policies can be rendered for.
    """
    click.echo("Supported resource types:\n")
    for rt in ResourceType:
        click.echo(f"  {rt.value}")
        click.echo(f"    Display name: {rt.display_name}")
        click.echo(f"    AWS service: {rt.aws_service}")
        click.echo(f"    Policy prefix: {rt.policy_prefix}")
        click.echo(f"    Discoverable: {'yes' if rt.is_discoverable else 'no (resources file only)'}")
        click.echo()


def _log_level(verbose: bool, quiet: bool) -> str:
    return "DEBUG" if verbose else ("ERROR" if quiet else "INFO")


def _load_cli_config(config_path: str | None, logger: LoggerPort) -> PolicyConfig:
    if config_path:
        logger.info(f"Loading policy config from {config_path}")
        return load_config(config_path)
    logger.info("Loading packaged policy config")
    return load_default_config()


def _print_config(cfg: PolicyConfig) -> None:
    """Print a summary of a validated config."""
    click.echo(f"Config OK ({cfg.mode.value})")
    click.echo(f"Resource defaults: {', '.join(sorted(cfg.resource_defaults))}")

    if cfg.mode == ConfigMode.VARIANTS:
        click.echo(f"Variants: {', '.join(v.name for v in cfg.variants)}")
        click.echo(f"Default variant: {cfg.default_variant}")
        return

    click.echo(f"Primary tag: {cfg.tag_keys.primary}")
    click.echo(f"  Rule sets: {', '.join(sorted(cfg.rule_sets.primary))}")
    click.echo(f"  Default: {cfg.defaults.primary}")
    click.echo(f"Secondary tag: {cfg.tag_keys.secondary}")
    click.echo(f"  Rule sets: {', '.join(sorted(cfg.rule_sets.secondary))}")
    click.echo(f"  Default: {cfg.defaults.secondary}")


def _print_summary(policy_run: PolicyRun) -> None:
    """Print a summary of a policy run."""
    click.echo("\n" + "=" * 60)
    click.echo("FMS POLICY SUMMARY")
    click.echo("=" * 60)

    if policy_run.was_skipped:
        click.echo(f"Skipped: {policy_run.skipped_reason}")
        click.echo("=" * 60)
        return

    click.echo(f"Dry run: {'yes' if policy_run.dry_run else 'no'}")
    click.echo(f"Resources: {len(policy_run.resources)}")
    click.echo(f"Policies rendered: {len(policy_run.policies)}")
    click.echo(f"Policies created: {len(policy_run.created)}")
    click.echo(f"Policies updated: {len(policy_run.updated)}")

    if policy_run.output_location:
        click.echo(f"\nPolicies written to: {policy_run.output_location}")
    click.echo("=" * 60)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
