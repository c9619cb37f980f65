#!/usr/bin/env python3
"""
Mcdoc to sandstone types compiler

Reads a vanilla-mcdoc symbol dump (or downloads it together with the
registries, block states and localization keys of the newest release) and
writes one TypeScript declaration file per module.

Usage:
    python -m mcdoc_typegen [-v] <symbols.json | --fetch> <output_folder>
"""

import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import requests

from .config import GENERATED_ROOT, GeneratorOptions
from .downloader import Downloader, HttpCache
from .errors import TypegenError
from .generator import TypesGenerator
from .mcdoc_types import SymbolTable, load_dispatchers
from .modules import FinalizedModule
from .registries import block_state_keys

USAGE = "Usage: python -m mcdoc_typegen [-v] <symbols.json | --fetch> <output_folder>"
FETCH = "--fetch"


class McdocCompiler:
    """Runs the generator and writes its modules"""

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()

    def compile_data(self, data: Dict, registries: Optional[Dict[str, List[str]]] = None,
                     translation_keys: Optional[List[str]] = None,
                     block_states: Optional[List[str]] = None) -> Dict[str, FinalizedModule]:
        generator = TypesGenerator(
            SymbolTable.from_json(data),
            load_dispatchers(data.get('mcdoc/dispatcher', {})),
            registries=registries,
            translation_keys=translation_keys,
            block_state_keys=block_states,
        )
        return generator.resolve_types()

    def compile_file(self, symbols_file: Path) -> Dict[str, FinalizedModule]:
        with open(symbols_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return self.compile_data(data)

    def compile_remote(self) -> Dict[str, FinalizedModule]:
        cache = HttpCache() if self.options.use_cache else HttpCache(None)
        downloader = Downloader(cache=cache)

        print("Downloading symbols...")
        data = downloader.symbols()
        version = downloader.latest_release()
        print(f"Downloading registries for {version}...")
        registries = downloader.registries(version)
        block_states = block_state_keys(downloader.block_states(version))
        translation_keys = downloader.translation_keys()

        return self.compile_data(data, registries, translation_keys, block_states)

    def output_file(self, module: FinalizedModule, output_dir: Path) -> Path:
        relative = module.file
        if relative.startswith(GENERATED_ROOT + '/'):
            relative = relative[len(GENERATED_ROOT) + 1:]
        return output_dir / f"{relative}.ts"

    def write_modules(self, modules: Dict[str, FinalizedModule], output_dir: Path) -> List[Path]:
        """Write every module below `output_dir`"""
        written = []
        for module in modules.values():
            output_file = self.output_file(module, output_dir)

            # Ensure output directory exists
            output_file.parent.mkdir(parents=True, exist_ok=True)

            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(module.render())

            print(f"Generated {output_file}")
            written.append(output_file)
        return written


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = list(sys.argv[1:] if argv is None else argv)
    verbose = '-v' in args
    args = [arg for arg in args if arg != '-v']

    if len(args) != 2:
        print(USAGE)
        sys.exit(1)

    if verbose:
        logging.basicConfig(level=logging.INFO)

    source, output_folder = args
    options = GeneratorOptions(out_dir=Path(output_folder))
    compiler = McdocCompiler(options)

    try:
        if source == FETCH:
            modules = compiler.compile_remote()
        else:
            symbols_file = Path(source)
            if not symbols_file.exists():
                print(f"Input file {symbols_file} does not exist")
                sys.exit(1)
            print(f"Compiling {symbols_file}")
            modules = compiler.compile_file(symbols_file)

        compiler.write_modules(modules, options.out_dir)
    except (TypegenError, requests.RequestException) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("Compilation complete!")


if __name__ == "__main__":
    main()
