"""CLI interface for exifcodec -- dump, thumbnail, remove, strip, resolution subcommands."""

import json
import sys
from pathlib import Path

import click

import exifcodec
from exifcodec.config import CodecConfig
from exifcodec.image_io import load_profile, save_with_profile
from exifcodec.log import (
    cli_dim,
    cli_error,
    cli_header,
    cli_info,
    cli_success,
    cli_warning,
    LogFile,
)
from exifcodec.models import ImageMetadata
from exifcodec.tags import ExifTag, parse_parts, resolve_tag, tag_name


def _load_or_exit(path, config):
    """Load the file's EXIF profile, or exit 1 if it carries none."""
    try:
        profile = load_profile(path, config)
    except OSError as e:
        click.echo(cli_error(f'Error: cannot read {path}: {e}'), err=True)
        sys.exit(1)
    if profile is None:
        click.echo(cli_error(f'Error: no EXIF data in {path}'), err=True)
        sys.exit(1)
    return profile


@click.group()
@click.version_option(version=exifcodec.__version__, prog_name='exifcodec')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='JSON file with reader limits and default parts.')
@click.option('--no-color', is_flag=True, help='Disable colored output.')
@click.pass_context
def main(ctx, config_path, no_color):
    """exifcodec -- read, edit and rewrite EXIF metadata.

    PATH arguments are JPEG/PNG/WebP images, or raw EXIF blocks
    saved as .exif / .bin files.
    """
    if no_color:
        ctx.color = False
    ctx.obj = CodecConfig.from_json(config_path) if config_path else CodecConfig.default()


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--invalid', is_flag=True, help='Also list tags skipped as invalid.')
@click.option('--json-out', type=click.Path(), help='Write values as JSON to file.')
@click.pass_obj
def dump(config, path, invalid, json_out):
    """List the EXIF values of PATH."""
    profile = _load_or_exit(path, config)
    values = profile.values

    click.echo(cli_header(f'{Path(path).name}: {len(values)} EXIF value(s)'))
    for value in values:
        click.echo(f'  {value.name:<28} {cli_dim(value.data_type.name):<10} '
                   f'{value.format_value()}')

    if profile.thumbnail_length:
        click.echo(cli_info(f'Thumbnail: {profile.thumbnail_length} bytes '
                            f'at offset {profile.thumbnail_offset}'))

    if invalid:
        for tag in profile.invalid_tags:
            click.echo(cli_warning(f'  invalid: {tag_name(tag)}'))

    if json_out:
        payload = {
            'file': str(path),
            'values': [
                {
                    'tag': int(value.tag),
                    'name': value.name,
                    'type': value.data_type.name,
                    'value': value.format_value(),
                }
                for value in values
            ],
            'invalid_tags': [tag_name(tag) for tag in profile.invalid_tags],
            'thumbnail_length': profile.thumbnail_length,
        }
        with open(json_out, 'w') as f:
            json.dump(payload, f, indent=2)
        click.echo(f'Results written to {json_out}')


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.argument('output', type=click.Path(dir_okay=False))
@click.pass_obj
def thumbnail(config, path, output):
    """Extract the embedded thumbnail of PATH to OUTPUT."""
    profile = _load_or_exit(path, config)
    data = profile.thumbnail_bytes()
    if data is None:
        click.echo(cli_error(f'Error: no thumbnail in {path}'), err=True)
        sys.exit(1)

    try:
        image = profile.create_thumbnail()
    except OSError as e:
        click.echo(cli_error(f'Error: thumbnail is not a readable image: {e}'), err=True)
        sys.exit(1)

    Path(output).write_bytes(data)
    click.echo(cli_success(f'Thumbnail {image.size[0]}x{image.size[1]} '
                           f'({len(data)} bytes) written to {output}'))


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.argument('tags', nargs=-1, required=True)
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Where to write the modified file.')
@click.option('--log', type=click.Path(), help='Write log to file.')
@click.pass_obj
def remove(config, path, tags, output, log):
    """Remove TAGS (names like Make, or ids like 0x010F) from PATH."""
    try:
        resolved = [resolve_tag(t) for t in tags]
    except ValueError as e:
        click.echo(cli_error(f'Error: {e}'), err=True)
        sys.exit(1)

    profile = _load_or_exit(path, config)
    with LogFile(log) as logger:
        removed = 0
        for tag in resolved:
            if profile.remove_value(tag):
                removed += 1
                logger.info(f'  removed {tag_name(tag)}')
            else:
                logger.warn(f'  {tag_name(tag)} not present')

        save_with_profile(path, output, profile)
        logger.info(f'Removed {removed} tag(s), written to {output}')


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Where to write the rewritten file.')
@click.option('--keep', default='ifd,exif,gps,thumbnail', show_default=True,
              help='Comma-separated groups to keep: ifd, exif, gps, thumbnail, all.')
@click.option('--log', type=click.Path(), help='Write log to file.')
@click.pass_obj
def strip(config, path, output, keep, log):
    """Rewrite PATH keeping only the selected EXIF groups."""
    try:
        parts = parse_parts(keep.split(','))
    except ValueError as e:
        click.echo(cli_error(f'Error: {e}'), err=True)
        sys.exit(1)

    profile = _load_or_exit(path, config)
    with LogFile(log) as logger:
        # Force a parse so to_bytes() re-encodes with the mask
        before = len(profile)
        profile.parts = parts
        save_with_profile(path, output, profile)
        logger.info(f'Rewrote {before} value(s) with parts {parts!r} to {output}')


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--dpi', type=float, required=True, help='New resolution (both axes).')
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Where to write the modified file.')
@click.pass_obj
def resolution(config, path, dpi, output):
    """Update existing XResolution/YResolution tags of PATH to DPI."""
    if dpi <= 0:
        click.echo(cli_error('Error: --dpi must be positive'), err=True)
        sys.exit(1)

    profile = _load_or_exit(path, config)
    metadata = ImageMetadata(horizontal_resolution=dpi, vertical_resolution=dpi,
                             exif_profile=profile)
    metadata.sync_profiles()

    for tag in (ExifTag.XResolution, ExifTag.YResolution):
        current = profile.get_resolution(tag)
        if current is None:
            click.echo(cli_warning(f'  {tag.name} not present, left unset'))
        else:
            click.echo(f'  {tag.name} = {current:g}')

    save_with_profile(path, output, profile)
    click.echo(cli_success(f'Written to {output}'))


if __name__ == '__main__':
    main()
