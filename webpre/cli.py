"""
Command-line interface for webpre
"""

import logging

import click

from .codec import CODECS, get_codec, read_image
from .config import DEFAULTS, check_args
from .errors import WebpreError
from .optimizer import optimize as optimize_file
from .selector import format_report
from .ssim import convert_to_gray, similarity


def setup_logging(verbose, log_file=None):
    """Configure the root logger for console and/or file output."""
    handlers = []
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    if verbose:
        handlers.append(logging.StreamHandler())
    if not handlers:
        handlers.append(logging.NullHandler())
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(message)s', handlers=handlers)


def echo_trial(attempt, trial):
    click.echo(f"[{attempt}] Quality = {trial.quality}, SSIM = {trial.similarity:.5f}, "
               f"Size = {trial.size / 1024:.2f}KB")


@click.group()
def main():
    """webpre - re-encode images at the smallest size that keeps a target SSIM"""
    pass


@main.command()
@click.argument('src', required=False, default='')
@click.argument('dest', required=False, default='')
@click.option('--max', 'max_quality', default=DEFAULTS['max_quality'], type=int,
              help=f"Maximum quality (default: {DEFAULTS['max_quality']})")
@click.option('--min', 'min_quality', default=DEFAULTS['min_quality'], type=int,
              help=f"Minimum quality (default: {DEFAULTS['min_quality']})")
@click.option('--target', '-t', default=DEFAULTS['target'], type=float,
              help=f"Target minimum SSIM (default: {DEFAULTS['target']})")
@click.option('--loops', '-l', default=DEFAULTS['loops'], type=int,
              help=f"Number of tries (default: {DEFAULTS['loops']})")
@click.option('--force', '-f', is_flag=True,
              help='Overwrite the output image if it already exists')
@click.option('--format', 'fmt', default=DEFAULTS['format'],
              type=click.Choice(sorted(CODECS)),
              help=f"Output format (default: {DEFAULTS['format']})")
@click.option('--color', is_flag=True,
              help='Encode the colour source instead of its grayscale version')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
@click.option('--log-file', type=click.Path(), help='Log file path')
@click.pass_context
def optimize(ctx, src, dest, max_quality, min_quality, target, loops, force, fmt,
             color, verbose, log_file):
    """Re-encode SRC into DEST at the lowest quality meeting the target SSIM."""
    setup_logging(verbose, log_file)

    msg = check_args(src, dest, force, max_quality, min_quality, target, loops)
    if msg is not None:
        click.echo(f"* Error: {msg}", err=True)
        click.echo(ctx.get_usage(), err=True)
        ctx.exit(1)

    try:
        selection = optimize_file(
            src, dest,
            codec=get_codec(fmt),
            min_quality=min_quality,
            max_quality=max_quality,
            target=target,
            loops=loops,
            encode_gray=not color,
            callback=echo_trial,
        )
    except (WebpreError, OSError) as e:
        raise click.ClickException(str(e))

    for line in format_report(selection):
        click.echo(line)


@main.command()
@click.argument('image_a', type=click.Path(exists=True))
@click.argument('image_b', type=click.Path(exists=True))
def compare(image_a, image_b):
    """Print the whole-image SSIM between two images."""
    try:
        index = similarity(convert_to_gray(read_image(image_a)),
                           convert_to_gray(read_image(image_b)))
    except WebpreError as e:
        raise click.ClickException(str(e))
    click.echo(f"SSIM = {index:.5f}")


@main.command()
@click.option('--host', default='127.0.0.1', help='Host to bind to (default: 127.0.0.1)')
@click.option('--port', default=5000, type=int, help='Port to bind to (default: 5000)')
@click.option('--debug/--no-debug', default=False, help='Enable debug mode')
def serve(host, port, debug):
    """Start the HTTP optimization server."""
    from .server import run_server

    click.echo(f"Starting webpre server on {host}:{port}...")
    run_server(host=host, port=port, debug=debug)


if __name__ == '__main__':
    main()
