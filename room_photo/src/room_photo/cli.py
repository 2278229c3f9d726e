"""Command line interface for quantizing room photos."""

from __future__ import annotations

import argparse
import struct
import sys
import warnings
from pathlib import Path
from typing import Iterable, List

from .errors import PhotoError
from .loader import RawPhoto, read_photo_file
from .palette import format_palette_text
from .preview import indexed_photo_to_image, read_image_as_565
from .quantizer import QuantizeOptions, QuantizedPhoto, quantize_photo

INPUT_SUFFIXES = (".photo", ".png")


def iter_inputs(paths: Iterable[str]) -> List[Path]:
    results: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            if path.suffix.lower() not in INPUT_SUFFIXES:
                raise PhotoError(f"Unsupported file type (expected .photo or .png): {path}")
            results.append(path)
        elif path.is_dir():
            for entry in sorted(path.iterdir()):
                if entry.is_file() and entry.suffix.lower() in INPUT_SUFFIXES:
                    results.append(entry)
        else:
            raise PhotoError(f"Input path does not exist: {path}")
    if not results:
        raise PhotoError("No .photo or .png files were found in the provided inputs.")
    return results


def load_raw_photo(path: Path) -> RawPhoto:
    if path.suffix.lower() == ".png":
        return read_image_as_565(path)
    return read_photo_file(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Quantize 5:6:5 room photos (.photo) or PNG files into 128 palette colors.\n"
            "Writes <name>.idx (uint16 width, uint16 height, one palette index per pixel)\n"
            "and <name>.pal (128 RGB triples of 6-bit color register values)."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help=".photo/.png files or folders containing them (non-recursive)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        required=True,
        help="Destination directory for .idx/.pal files",
    )
    parser.add_argument(
        "--reserved-slots",
        type=int,
        default=QuantizeOptions.reserved_slots,
        help="Palette slots kept for sprite art; photo indices start here (default: 64)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Also write <name>_preview.png rendered through the chosen palette",
    )
    parser.add_argument(
        "--print-palette",
        action="store_true",
        help="Print the chosen palette entries for each input",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing files without prompting",
    )
    return parser


def output_names(path: Path, preview: bool) -> List[str]:
    names = [f"{path.stem}.idx", f"{path.stem}.pal"]
    if preview:
        names.append(f"{path.stem}_preview.png")
    return names


def encode_indexed(quantized: QuantizedPhoto) -> bytes:
    return struct.pack("<HH", quantized.width, quantized.height) + quantized.photo.pixels


def encode_palette(quantized: QuantizedPhoto) -> bytes:
    return bytes(channel for color in quantized.colors for channel in color)


def write_outputs(
    inputs: List[Path],
    output_dir: Path,
    options: QuantizeOptions,
    preview: bool,
    print_palette: bool,
    force: bool,
) -> None:
    seen = set()
    conflicts = []
    for src in inputs:
        for name in output_names(src, preview):
            if name in seen:
                raise PhotoError(f"Duplicate output name would occur: {name}")
            seen.add(name)
            target = output_dir / name
            if target.exists() and not force:
                conflicts.append(str(target))
    if conflicts:
        raise PhotoError(
            "Output files already exist (use --force to overwrite):\n" + "\n".join(conflicts)
        )

    output_dir.mkdir(parents=True, exist_ok=True)

    for src in inputs:
        raw = load_raw_photo(src)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            quantized = quantize_photo(raw.width, raw.height, raw.pixels, options)
        for warning in caught:
            print(f"Warning: {src}: {warning.message}")

        names = output_names(src, preview)
        (output_dir / names[0]).write_bytes(encode_indexed(quantized))
        (output_dir / names[1]).write_bytes(encode_palette(quantized))
        if preview:
            if quantized.width * quantized.height == 0:
                print(f"Warning: {src}: empty photo, preview skipped")
                names = names[:2]
            else:
                indexed_photo_to_image(quantized).save(output_dir / names[2])
        for name in names:
            print(f"wrote {output_dir / name}")
        if print_palette:
            print(format_palette_text(quantized.colors, quantized.palette.base_slot))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if not 0 <= args.reserved_slots <= 128:
            raise PhotoError("--reserved-slots must be between 0 and 128")
        options = QuantizeOptions(reserved_slots=args.reserved_slots)
        inputs = iter_inputs(args.inputs)
        write_outputs(
            inputs,
            Path(args.output_dir),
            options,
            args.preview,
            args.print_palette,
            args.force,
        )
        return 0
    except PhotoError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
