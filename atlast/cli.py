"""
atlast CLI - Command-line interface for building texture atlases
"""

import click
import logging
import sys
from pathlib import Path
from PIL import Image
from atlast.config import AtlasConfig, DEFAULT_OUTPUT
from atlast.exceptions import ComposeError, LoaderError, PackingError, SerializeError
from atlast.loader import load_directory
from atlast.pipeline import build_atlas, load_atlas


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )


def _fail(label: str, error: Exception, verbose: bool = False) -> None:
    click.secho(f"{label}: {error}", fg='red', err=True)
    if verbose:
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.version_option()
def cli():
    """
    atlast - Create texture atlases that last.

    Examples:
        atlast pack -d sprites/ -o sprites.atlas
        atlast inspect sprites.atlas
    """
    pass


@cli.command()
@click.option('-d', '--asset-dir', default='./', show_default=True, help='Directory to scan for PNG images')
@click.option('-o', '--output', default=DEFAULT_OUTPUT, show_default=True, help='Output .atlas file')
@click.option('--max-dimension', type=int, default=None, help='Largest canvas width/height allowed (default: 16384 or $ATLAST_MAX_DIMENSION)')
@click.option('--verbose', '-v', is_flag=True, help='Show per-image progress')
def pack(asset_dir, output, max_dimension, verbose):
    """
    Pack every PNG under a directory into one atlas file.

    Examples:
        atlast pack
        atlast pack -d assets/icons -o icons.atlas --max-dimension 4096
    """
    _configure_logging(verbose)
    try:
        config = AtlasConfig.from_env(max_dimension=max_dimension)

        click.echo(f"Loading images from: {asset_dir}")
        images = load_directory(asset_dir, config)

        click.echo("Packing...")
        build = build_atlas(images, config)

        click.echo("Writing...")
        build.save(output)

        click.secho(
            f"✓ Packed {len(build.table)} images into {build.canvas.width}x{build.canvas.height} "
            f"atlas ({build.efficiency:.0%} used): {output}",
            fg='green'
        )

    except FileNotFoundError as e:
        _fail("Error", e)
    except LoaderError as e:
        _fail("Load Error", e, verbose)
    except PackingError as e:
        _fail("Packing Error", e, verbose)
    except ComposeError as e:
        _fail("Compose Error", e, verbose)
    except SerializeError as e:
        _fail("Write Error", e, verbose)
    except ValueError as e:
        _fail("Error", e)
    except Exception as e:
        _fail("Unexpected error", e, verbose)


@cli.command()
@click.argument('atlas_path')
@click.option('--verbose', '-v', is_flag=True, help='Show normalized UV coordinates')
def inspect(atlas_path, verbose):
    """
    List the images stored in an atlas file.

    Examples:
        atlast inspect output.atlas
    """
    try:
        if not Path(atlas_path).exists():
            raise FileNotFoundError(f"Atlas file not found: {atlas_path}")

        canvas, table = load_atlas(atlas_path, AtlasConfig.from_env())

        click.echo(f"Canvas: {canvas.width}x{canvas.height}, {len(table)} images")
        for p in table.placements:
            line = f"  {p.name}: x={p.x} y={p.y} w={p.width} h={p.height}"
            if verbose:
                u1, v1, u2, v2 = p.uv(canvas.width, canvas.height)
                line += f" uv=[{u1:.4f}, {v1:.4f}, {u2:.4f}, {v2:.4f}]"
            click.echo(line)

    except FileNotFoundError as e:
        _fail("Error", e)
    except SerializeError as e:
        _fail("Read Error", e, verbose)
    except Exception as e:
        _fail("Unexpected error", e, verbose)


@cli.command()
@click.argument('atlas_path')
@click.argument('output_dir')
@click.option('--verbose', '-v', is_flag=True, help='List each extracted file')
def unpack(atlas_path, output_dir, verbose):
    """
    Extract every image in an atlas back into separate PNG files.

    Examples:
        atlast unpack output.atlas extracted/
    """
    try:
        if not Path(atlas_path).exists():
            raise FileNotFoundError(f"Atlas file not found: {atlas_path}")

        canvas, table = load_atlas(atlas_path, AtlasConfig.from_env())

        root = Path(output_dir).resolve()
        for p in table.placements:
            target = (root / p.name).resolve()
            if root not in target.parents:
                raise ValueError(f"Refusing to write '{p.name}' outside {output_dir}")
            target.parent.mkdir(parents=True, exist_ok=True)
            Image.frombytes('RGBA', (p.width, p.height), canvas.region(p)).save(target, format='PNG')
            if verbose:
                click.echo(f"  {p.name}")

        click.secho(f"✓ Extracted {len(table)} images to {output_dir}", fg='green')

    except FileNotFoundError as e:
        _fail("Error", e)
    except SerializeError as e:
        _fail("Read Error", e, verbose)
    except ValueError as e:
        _fail("Error", e)
    except Exception as e:
        _fail("Unexpected error", e, verbose)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
