import argparse
import os
import sys

from dlge import DLGE, DlgeDocument
from hashlist import HashList
from language_map import Version
from resource_meta import ResourceMeta


def default_hashlist_path() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(sys.argv[0])), "hash_list.hmla")


def load_hashlist(path: str) -> HashList:
    if not os.path.exists(path):
        print(f"Error: Hash list '{path}' not found.")
        print("Download hash_list.hmla and place it next to this script, or pass --hashlist.")
        sys.exit(1)

    with open(path, "rb") as f:
        hashlist = HashList.load(f.read())
    print(f"Loaded hash list v{hashlist.version} ({len(hashlist.tags)} tags, {len(hashlist.switches)} switches).")
    return hashlist


def convert_file(converter: DLGE, input_path: str, meta_path: str, output_path: str):
    print(f"Converting {input_path} to JSON...")
    with open(input_path, "rb") as f:
        data = f.read()
    with open(meta_path, "r", encoding="utf-8") as f:
        meta = ResourceMeta.from_json(f.read())

    document = converter.convert(data, meta)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(document.to_json(indent=4))
    print(f"Successfully exported to {output_path}")


def rebuild_file(converter: DLGE, input_path: str, output_path: str, meta_path: str):
    print(f"Rebuilding {input_path}...")
    with open(input_path, "r", encoding="utf-8") as f:
        document = DlgeDocument.from_json(f.read())

    rebuilt = converter.rebuild(document)
    with open(output_path, "wb") as f:
        f.write(rebuilt.file)
    with open(meta_path, "w", encoding="utf-8") as f:
        f.write(rebuilt.meta.to_json())
    print(f"Wrote {output_path} ({len(rebuilt.file)} bytes) and {meta_path} ({len(rebuilt.meta.hash_reference_data)} dependencies)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DLGE (dialogue event) conversion tool")
    parser.add_argument("--convert", dest="convert_file", help="Path to the .DLGE file to convert to JSON")
    parser.add_argument("--rebuild", dest="rebuild_file", help="Path to the .json file to rebuild into a DLGE")
    parser.add_argument("--meta", help="Resource meta JSON (default: <input>.meta.json / <output>.meta.json)")
    parser.add_argument("--output", help="Output path (default: <input>.json / <input>.DLGE)")
    parser.add_argument("--version", default="H3", choices=["H2016", "H2", "H3"], help="Game version (default: H3)")
    parser.add_argument("--hashlist", default=None, help="Path to hash_list.hmla (default: next to this script)")
    parser.add_argument("--lang-map", help="Comma separated language map, e.g. xx,en,fr,it,de,es")
    parser.add_argument("--default-locale", default="en", help="Locale holding the default wav/ffx (default: en)")
    parser.add_argument("--hex-precision", action="store_true", help="Keep Random weights as hex strings")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    print("DLGE Tool v0.5")

    if not args.convert_file and not args.rebuild_file:
        parser.print_help()
        return

    try:
        hashlist = load_hashlist(args.hashlist or default_hashlist_path())
        converter = DLGE(
            hashlist,
            Version.parse(args.version),
            lang_map=args.lang_map,
            default_locale=args.default_locale,
            hex_precision=args.hex_precision,
        )

        if args.convert_file:
            if not os.path.exists(args.convert_file):
                print(f"Error: File '{args.convert_file}' not found.")
                sys.exit(1)
            meta_path = args.meta or f"{args.convert_file}.meta.json"
            output_path = args.output or f"{args.convert_file}.json"
            convert_file(converter, args.convert_file, meta_path, output_path)
        else:
            if not os.path.exists(args.rebuild_file):
                print(f"Error: File '{args.rebuild_file}' not found.")
                sys.exit(1)
            base_name = args.rebuild_file
            if base_name.lower().endswith(".json"):
                base_name = base_name[:-5]
            output_path = args.output or base_name
            if output_path == args.rebuild_file:
                output_path = f"{base_name}.DLGE"
            meta_path = args.meta or f"{output_path}.meta.json"
            rebuild_file(converter, args.rebuild_file, output_path, meta_path)
    except Exception as e:
        print(f"Error processing file: {type(e).__name__}: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    print("Done!")


if __name__ == "__main__":
    main()
