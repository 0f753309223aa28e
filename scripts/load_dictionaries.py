"""Check a dictionary directory and print a load report.

Usage:
    python -m scripts.load_dictionaries [dict_dir]
"""

import argparse
import logging
import os
import sys

from core.dictionary import DictionaryCatalog


def build_report(catalog: DictionaryCatalog) -> dict:
    """Load the catalog and validate every dictionary in it."""
    loaded = catalog.load()
    validations = {}
    for dictionary in loaded:
        validations[dictionary.id] = catalog.validate(dictionary.id)
    return {
        'summary': catalog.summary(),
        'loaded': [d.to_dict() for d in loaded],
        'validations': validations,
        'errors': catalog.errors
    }


def print_report(report: dict):
    summary = report['summary']
    print(f"Dictionaries: {summary['total_dictionaries']}, words: {summary['total_words']}")
    print(f"Categories: {', '.join(summary['categories']) or '-'}")

    for d in report['loaded']:
        validation = report['validations'][d['id']]
        status = 'ok' if validation['is_valid'] else f"{len(validation['issues'])} issue(s)"
        print(f"  {d['id']:<32} {d['total_words']:>6} words  {d['formatted_difficulty']:<12} {status}")
        for issue in validation['issues']:
            print(f"      - {issue}")

    if report['errors']:
        print("Errors:")
        for error in report['errors']:
            print(f"  {error['filename']}: {error['error']}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Validate a directory of dictionary files')
    parser.add_argument('dict_dir', nargs='?', default=os.environ.get('VOCABIN_DICT_DIR', 'dicts'),
                        help='Directory with dictionary JSON files (default: $VOCABIN_DICT_DIR or ./dicts)')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    report = build_report(DictionaryCatalog(args.dict_dir))
    print_report(report)
    return 0 if report['loaded'] else 1


if __name__ == '__main__':
    sys.exit(main())
