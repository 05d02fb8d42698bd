from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from quotevault.conf import get_setting
from quotevault.disclosure import DisclosureError, block_size, pixelate, resolve_clarity


class Command(BaseCommand):
    help = "Render an image at a clarity level (or hint count) to preview base_clarity calibration."

    def add_arguments(self, parser):
        parser.add_argument("source", help="Path of the source image.")
        parser.add_argument("output", help="Where to write the rendered image.")
        parser.add_argument("--level", type=float, default=None, help="Explicit clarity in [0, 1].")
        parser.add_argument("--hint", type=int, default=None, help="Hint count, combined with --base-clarity.")
        parser.add_argument("--base-clarity", type=float, default=0.02, help="Calibration floor (default 0.02).")
        parser.add_argument("--format", default=None, help="Output format (default RENDER_FORMAT).")

    def handle(self, *args, **options):
        image_format = (options["format"] or get_setting("RENDER_FORMAT")).upper()
        hint = options["hint"]
        if options["level"] is None and hint is None:
            hint = 0
        try:
            clarity = resolve_clarity(options["level"], hint, options["base_clarity"])
            data = pixelate(
                options["source"],
                clarity,
                image_format=image_format,
                quality=get_setting("RENDER_QUALITY"),
            )
        except DisclosureError as e:
            raise CommandError(str(e)) from e

        Path(options["output"]).write_bytes(data)
        self.stdout.write(self.style.SUCCESS(
            f"Wrote {options['output']} at clarity {clarity:.2f} ({block_size(clarity)}px blocks)."
        ))
