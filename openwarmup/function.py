import os
import posixpath

from openwarmup.warmers import WarmerConfig, capitalize


RUNTIME = 'nodejs22.x'


def function_key(warmer_name: str) -> str:
  return f'warmUpPlugin{capitalize(warmer_name)}'


def add_warmer_function_to_service(service: dict, warmer_name: str, warmer_config: WarmerConfig) -> None:
  function = {
    'description': f'Serverless WarmUp Plugin (warmer "{warmer_name}")',
    'events': warmer_config.events,
    # The host expects forward slashes whatever the build machine uses.
    'handler': posixpath.sep.join(warmer_config.path_handler.split(os.sep)),
    'memorySize': warmer_config.memory_size,
    'name': warmer_config.name,
  }

  if warmer_config.architecture:
    function['architecture'] = warmer_config.architecture

  function['runtime'] = RUNTIME
  function['package'] = warmer_config.package
  function['timeout'] = warmer_config.timeout

  if warmer_config.environment:
    function['environment'] = warmer_config.environment

  if warmer_config.tracing is not None:
    function['tracing'] = warmer_config.tracing

  if warmer_config.log_retention_in_days is not None:
    function['logRetentionInDays'] = warmer_config.log_retention_in_days

  if warmer_config.role_name:
    function['roleName'] = warmer_config.role_name

  if warmer_config.role:
    function['role'] = warmer_config.role

  if warmer_config.tags:
    function['tags'] = warmer_config.tags

  if warmer_config.vpc:
    function['vpc'] = warmer_config.vpc

  function['layers'] = []

  service['functions'][function_key(warmer_name)] = function
