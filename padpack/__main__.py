"""
padpack — entry point.

Usage:
    python -m padpack pack INPUT.json                  # print the PackOutput
    python -m padpack pack INPUT.json --out OUT.json
    python -m padpack pack INPUT.json --verbose        # debug logging
"""

import json
import logging
import sys

USAGE = "Usage: python -m padpack pack INPUT.json [--out OUTPUT.json] [--verbose]"


def main():
    args = sys.argv[1:]
    cmd = args[0] if args else ""

    if cmd == "pack" and len(args) >= 2:
        input_path = args[1]
        out_path = None
        verbose = False
        for i, a in enumerate(args):
            if a == "--out" and i + 1 < len(args):
                out_path = args[i + 1]
            elif a == "--verbose":
                verbose = True

        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

        from padpack.models import PackError
        from padpack.packer import pack, pack_input_from_dict, pack_output_to_dict

        with open(input_path, encoding="utf-8") as f:
            pack_input = pack_input_from_dict(json.load(f))
        try:
            output = pack(pack_input)
        except PackError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)

        text = json.dumps(pack_output_to_dict(output), indent=2)
        if out_path:
            with open(out_path, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        else:
            print(text)
    else:
        if cmd:
            print(f"Unknown command: {cmd}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
