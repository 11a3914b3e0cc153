"""
CLI commands for tsload.
"""

import click
import sys
from pathlib import Path

from tsload.config import build_config, COMPRESSIONS, USE_CASES, UNSUPPORTED_POLICIES
from tsload.exceptions import ConfigurationError, TsloadError
from tsload.models import RunSummary


def _fail(message: str):
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _print_summary(summary: RunSummary):
    click.echo("\n=== Run Summary ===")
    click.echo(f"Rows written: {summary.rows_written:,}")
    click.echo(f"Batches sent: {summary.batches_sent:,}")
    click.echo(f"Raw size: {summary.raw_bytes / 1024:.1f} KB")
    click.echo(f"Compressed size: {summary.compressed_bytes / 1024:.1f} KB")
    click.echo(f"Compression ratio: {summary.compression_ratio:.2f}×")
    if summary.retries:
        click.echo(f"Retries: {summary.retries}")
    if summary.skipped_count:
        reasons = ", ".join(f"{k}={v}" for k, v in sorted(summary.skipped.items()))
        click.echo(f"Skipped points: {summary.skipped_count} ({reasons})")
    click.echo(f"Elapsed: {summary.elapsed:.2f}s ({summary.rows_per_second:,.0f} rows/s)")


@click.command()
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='YAML config file (keys are option names)')
@click.option('--use', type=click.Choice(USE_CASES), help='Workload to simulate (default: devops)')
@click.option('--scale', type=int, help='Number of hosts/trucks to simulate (default: 1)')
@click.option('--timestamp-start', help='Start of the simulated window (RFC3339)')
@click.option('--timestamp-end', help='End of the simulated window (RFC3339)')
@click.option('--seed', type=int, help='Random seed (default: 0)')
@click.option('--log-interval', type=float, help='Simulated seconds between readings (default: 10)')
@click.option('--limit', type=int, help='Max points to generate, 0 = whole window')
@click.option('--interleaved-generation-group-id', 'interleaved_group_id', type=int,
              help='Group id of this generator when splitting a stream (default: 0)')
@click.option('--interleaved-generation-groups', 'interleaved_num_groups', type=int,
              help='Number of generators splitting the stream (default: 1)')
@click.option('--batch-size', type=int, help='Rows per batch (default: 100)')
@click.option('--compression', type=click.Choice(COMPRESSIONS), help='Batch compression (default: gzip)')
@click.option('--compression-level', type=int, help='Compression level for the chosen scheme')
@click.option('--on-unsupported', type=click.Choice(UNSUPPORTED_POLICIES),
              help='Skip or abort on points that cannot be encoded (default: skip)')
@click.option('--url', help='Write endpoint URL')
@click.option('--db', 'database', help='Target database (default: _internal)')
@click.option('--timeout', type=float, help='Per-request timeout in seconds (default: 30)')
@click.option('--max-retries', type=int, help='Retries for retryable push failures (default: 3)')
@click.option('--output', '-o', help='Write batches to a capture file instead of pushing them')
def generate(config_path, **options):
    """
    Generate a synthetic workload and push it to the database.

    Example:
        tsload generate --use devops --scale 10 --limit 100000 --url http://tsdb:9000/api/v1/write
    """
    from tsload.services import DataGenerator

    try:
        config = build_config(config_path, **options).validate()
    except ConfigurationError as e:
        _fail(str(e))

    target = config.output or f"{config.url}?db={config.database}"
    click.echo(f"Generating {config.use} workload (scale={config.scale}) -> {target}")

    try:
        summary = DataGenerator().generate(config)
    except TsloadError as e:
        _fail(str(e))

    _print_summary(summary)


@click.command()
@click.option('--input', '-i', 'input_path', required=True, type=click.Path(path_type=Path),
              help='Capture file written by generate --output')
@click.option('--url', default=None, help='Write endpoint URL')
@click.option('--db', 'database', default=None, help='Target database (default: _internal)')
@click.option('--timeout', type=float, default=None, help='Per-request timeout in seconds')
@click.option('--max-retries', type=int, default=None, help='Retries for retryable push failures')
@click.option('--limit', type=int, default=None, help='Stop after this many batches')
def load(input_path, url, database, timeout, max_retries, limit):
    """
    Push a previously captured workload to the database.

    Example:
        tsload load -i captures/devops.tsl --url http://tsdb:9000/api/v1/write
    """
    from tsload.services import HTTPPusher, replay_capture

    if not input_path.exists():
        _fail(f"Capture file not found: {input_path}")

    try:
        config = build_config(url=url, database=database, timeout=timeout,
                              max_retries=max_retries).validate()
    except ConfigurationError as e:
        _fail(str(e))

    click.echo(f"Loading {input_path.name} -> {config.url}?db={config.database}")
    pusher = HTTPPusher(
        config.url,
        config.database,
        timeout=config.timeout,
        max_retries=config.max_retries,
        backoff_base=config.backoff_base,
        backoff_max=config.backoff_max,
    )
    try:
        summary = replay_capture(input_path, pusher, limit=limit)
    except TsloadError as e:
        _fail(str(e))
    finally:
        pusher.close()

    _print_summary(summary)


@click.command()
@click.option('--input', '-i', 'input_path', required=True, type=click.Path(path_type=Path),
              help='Capture file to inspect')
@click.option('--rows', type=int, default=0, help='Decode and print up to N rows (default: 0)')
def inspect(input_path, rows):
    """
    Show the batches (and optionally rows) stored in a capture file.

    Example:
        tsload inspect -i captures/devops.tsl --rows 5
    """
    from tsload.context.encoding import decode_rows
    from tsload.services import BatchCompressor, read_capture

    if not input_path.exists():
        _fail(f"Capture file not found: {input_path}")

    decompressors = {}
    batches = row_count = raw = compressed = shown = 0
    try:
        for batch in read_capture(input_path):
            batches += 1
            row_count += batch.row_count
            raw += batch.raw_size
            compressed += batch.size
            if shown >= rows:
                continue
            codec = decompressors.setdefault(batch.content_encoding,
                                             BatchCompressor(batch.content_encoding))
            for row in decode_rows(codec.decompress(batch.payload)):
                if shown >= rows:
                    break
                tags = ",".join(f"{k}={v}" for k, v in row.tags)
                fields = ",".join(f"{name}={value:g}" for name, _, value in row.fields)
                click.echo(f"{row.name},{tags} {fields} {row.timestamp}")
                shown += 1
    except (TsloadError, ValueError, OSError) as e:
        _fail(str(e))

    click.echo(f"\nBatches: {batches}")
    click.echo(f"Rows: {row_count}")
    click.echo(f"Raw size: {raw:,} bytes")
    click.echo(f"Compressed size: {compressed:,} bytes")


if __name__ == '__main__':
    generate()
