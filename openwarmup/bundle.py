import json
import os
import shutil

from openwarmup.artifact import create_warmer_artifact
from openwarmup.config import Config
from openwarmup.function import add_warmer_function_to_service
from openwarmup.role import add_warmer_role_to_resources
from openwarmup.warmers import WarmerConfig, get_warmers_config


def load_service(service_path: str) -> dict:
  with open(service_path, 'r') as file:
    return json.load(file)


def write_service(output_path: str, service: dict) -> None:
  os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
  with open(output_path, 'w') as file:
    json.dump(service, file, indent=2)


def prepare_folder(handler_folder: str, warmer_config: WarmerConfig) -> None:
  if warmer_config.clean_folder and os.path.exists(handler_folder):
    print(f'{handler_folder} already exists. Removing...')
    shutil.rmtree(handler_folder)


def create_warmer(
  service: dict,
  stage: str,
  region: str,
  service_dir: str,
  warmer_name: str,
  warmer_config: WarmerConfig,
) -> None:
  count = len(warmer_config.functions)
  print(f'Creating warmer "{warmer_name}" to warm up {count} function{"" if count == 1 else "s"}...')
  if warmer_config.verbose:
    for function in warmer_config.functions:
      print(f'  * {function.name}')

  handler_folder = os.path.join(service_dir, warmer_config.folder_name)
  prepare_folder(handler_folder, warmer_config)

  # A user supplied role is used as is.
  if not warmer_config.role:
    add_warmer_role_to_resources(service, stage, warmer_name, warmer_config)

  create_warmer_artifact(
    warmer_config.functions,
    bool(warmer_config.tracing),
    warmer_config.verbose,
    region,
    handler_folder,
  )
  add_warmer_function_to_service(service, warmer_name, warmer_config)


def create(config: Config) -> dict:
  print(f'Preparing warmers from {config.service_path}...')

  service = load_service(config.service_path)
  service.setdefault('functions', {})

  stage = config.resolve_stage(service)
  region = config.resolve_region(service)

  for warmer_name, warmer_config in get_warmers_config(service, stage).items():
    if not warmer_config.functions:
      print(f'Skipping warmer "{warmer_name}" creation. No functions to warm up.')
      continue

    create_warmer(service, stage, region, config.service_dir, warmer_name, warmer_config)

  write_service(config.output_path, service)

  print(f'Generation complete! Service definition is available in {config.output_path}')
  return service
