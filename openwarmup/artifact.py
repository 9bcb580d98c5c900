import json
import os
import subprocess

import jinja2

from openwarmup.warmers import FunctionTarget


TEMPLATE_PATH = os.path.join(os.path.dirname(os.path.realpath(__file__)), 'assets', 'warmer')
TEMPLATE_NAME = 'index.mjs.j2'
HANDLER_FILE_NAME = 'index.mjs'

# Installed next to the traced artifact; the Lambda runtime only bundles the AWS SDK.
TRACING_DEPENDENCY = 'aws-xray-sdk-core'


def render_warmer_source(functions: list[FunctionTarget], tracing: bool, verbose: bool, region: str) -> str:
  environment = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATE_PATH),
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    lstrip_blocks=True,
    trim_blocks=True,
  )

  return environment.get_template(TEMPLATE_NAME).render(
    region=region,
    tracing=tracing,
    verbose=verbose,
    tracing_dependency=TRACING_DEPENDENCY,
    functions=json.dumps([function.to_dict() for function in functions], indent=2, ensure_ascii=False),
  )


def install_tracing_dependency(handler_folder: str) -> None:
  for command in (['npm', 'init', '-y'], ['npm', 'install', '--save', TRACING_DEPENDENCY]):
    subprocess.run(command, cwd=handler_folder, text=True, capture_output=True, check=True)


def create_warmer_artifact(
  functions: list[FunctionTarget],
  tracing: bool,
  verbose: bool,
  region: str,
  handler_folder: str,
) -> None:
  """
  Writes the warmer's index.mjs into handler_folder, replacing any previous one. When tracing is enabled the folder
  also gets its own package.json with the X-Ray SDK installed. Failures of any step are raised to the caller.
  """
  source = render_warmer_source(functions, tracing, verbose, region)

  os.makedirs(handler_folder, exist_ok=True)
  with open(os.path.join(handler_folder, HANDLER_FILE_NAME), 'w', encoding='utf-8', newline='') as file:
    file.write(source)

  if tracing:
    install_tracing_dependency(handler_folder)
