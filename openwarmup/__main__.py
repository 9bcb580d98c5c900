#!python

import argparse
import os
import subprocess
import sys

from openwarmup import bundle
from openwarmup.config import Config
from openwarmup.warmers import WarmerConfigError


parser = argparse.ArgumentParser(description='Generates warmer functions for a Serverless service.')
subparsers = parser.add_subparsers(dest='command', required=True)

generate_parser = subparsers.add_parser('generate', help='Generate warmer roles, artifacts and functions.')
generate_parser.add_argument(
  '--config-path',
  '-c',
  type=str,
  required=False,
  help='Path to the open-warmup.config.json configuration file.'
)
generate_parser.add_argument('--stage', type=str, required=False, help='Stage to generate the warmers for.')
generate_parser.add_argument('--region', type=str, required=False, help='Region the warmers invoke functions in.')


def main():
  args = parser.parse_args()

  if args.command == 'generate':
    config = Config.from_path(args.config_path)
    if args.stage:
      config.stage = args.stage

    if args.region:
      config.region = args.region

    if not os.path.exists(config.service_path):
      print(f'Error: Service definition {config.service_path} does not exist.', file=sys.stderr)
      sys.exit(1)

    try:
      bundle.create(config)
    except WarmerConfigError as error:
      print(f'Error: {error}', file=sys.stderr)
      sys.exit(1)
    except subprocess.CalledProcessError as error:
      print(f"Error: {' '.join(error.cmd)} failed with exit code {error.returncode}.", file=sys.stderr)
      print(error.stderr, file=sys.stderr)
      sys.exit(1)

  sys.exit(0)

if __name__ == '__main__':
  main()
