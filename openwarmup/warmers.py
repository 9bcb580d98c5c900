from dataclasses import dataclass, field
import json
import os
from typing import Any, Optional, Self


DEFAULT_PAYLOAD = '{"source":"serverless-plugin-warmup"}'


class WarmerConfigError(ValueError):
  def __init__(self, warmer_name: str, key: str, message: str):
    super().__init__(f'Invalid warmer "{warmer_name}" option "{key}": {message}')
    self.warmer_name = warmer_name
    self.key = key


def capitalize(value: str) -> str:
  return value[:1].upper() + value[1:]


def to_json_text(value: Any) -> str:
  # Compact separators so the text matches what the generated script would produce itself.
  return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


@dataclass(kw_only=True)
class FunctionConfig:
  """
  Whether the function is warmed. Either a boolean, a stage name or a list of stage names.
  """
  enabled: bool | str | list[str] | None = False

  """
  Optional - The version or alias to invoke. The generated script falls back to SERVERLESS_ALIAS.
  """
  alias: Optional[str] = None

  """
  Optional - JSON text sent as the custom client context. Falls back to the payload when not set.
  """
  client_context: str | bool | None = None

  """
  The invocation payload, as JSON text unless payload_raw is set.
  """
  payload: Optional[str] = DEFAULT_PAYLOAD

  """
  Whether the payload option is passed through as given instead of being JSON encoded.
  """
  payload_raw: bool = False

  """
  Number of simultaneous invocations per warm up run. Passed to the script unchanged, which parses it with parseInt.
  """
  concurrency: int | str = 1

  def is_enabled(self, stage: str) -> bool:
    if isinstance(self.enabled, bool):
      return self.enabled

    if isinstance(self.enabled, str):
      return self.enabled == stage

    if isinstance(self.enabled, list):
      return stage in self.enabled

    return False

  def to_dict(self) -> dict:
    """
    The shape embedded in the generated script. Unset values are left out entirely so that the script sees them as
    undefined rather than null.
    """
    result = {
      'concurrency': self.concurrency,
      'clientContext': self.client_context,
      'payload': self.payload,
      'alias': self.alias,
    }
    return {key: value for key, value in result.items() if value is not None}

  @staticmethod
  def from_dict(data: dict) -> Self:
    """
    Builds the config from the merged warmer and function options, so payloadRaw applies to whichever layer set the
    payload. Values are not validated; the generated script parses the concurrency itself.
    """
    defaults = FunctionConfig()
    payload_raw = data.get('payloadRaw', defaults.payload_raw)

    if 'payload' in data:
      payload = data['payload'] if payload_raw else to_json_text(data['payload'])
    else:
      payload = defaults.payload

    # Falsy client contexts stay falsy; the script then sends no client context.
    client_context = data.get('clientContext')
    client_context = client_context and to_json_text(client_context)

    return FunctionConfig(
      enabled=data.get('enabled', defaults.enabled),
      alias=data.get('alias', defaults.alias),
      client_context=client_context,
      payload=payload,
      payload_raw=payload_raw,
      concurrency=data.get('concurrency', defaults.concurrency),
    )


@dataclass(kw_only=True)
class FunctionTarget:
  """
  The deployed name of the function to warm.
  """
  name: str

  """
  Invocation settings baked into the generated script.
  """
  config: FunctionConfig

  def to_dict(self) -> dict:
    return {
      'name': self.name,
      'config': self.config.to_dict(),
    }


@dataclass(kw_only=True)
class WarmerConfig:
  """
  The deployed name of the warmer function.
  """
  name: str

  """
  The folder, relative to the service directory, the warmer artifact is written to.
  """
  folder_name: str

  """
  The warmer function's handler, using the host's path separator.
  """
  path_handler: str

  """
  Whether the warmer folder is removed before the artifact is generated.
  """
  clean_folder: bool = True

  """
  Optional - The logical name or ARN of the role for the warmer. A dedicated role is generated when not set.
  """
  role: Optional[str] = None

  """
  Optional - The physical name of the generated role.
  """
  role_name: Optional[str] = None

  tags: Optional[dict] = None
  vpc: Optional[dict] = None
  events: list = field(default_factory=list)
  architecture: Optional[str] = None
  package: dict = field(default_factory=dict)
  memory_size: int = 128
  timeout: int = 10
  environment: dict[str, str] = field(default_factory=dict)
  tracing: Optional[bool] = None

  """
  Whether the generated script logs every step of the warm up.
  """
  verbose: bool = True

  log_retention_in_days: Optional[int] = None

  """
  The functions warmed by this warmer, in service order.
  """
  functions: list[FunctionTarget] = field(default_factory=list)

  @staticmethod
  def from_dict(service: dict, stage: str, warmer_name: str, data: dict) -> Self:
    folder_name = data.get('folderName', os.path.join('.warmup', warmer_name))
    if not isinstance(folder_name, str):
      raise WarmerConfigError(warmer_name, 'folderName', f'expected a string, got {folder_name!r}')

    events = data.get('events', [{'schedule': 'rate(5 minutes)'}])
    if not isinstance(events, list):
      raise WarmerConfigError(warmer_name, 'events', f'expected a list, got {events!r}')

    environment = data.get('environment', {})
    if not isinstance(environment, dict):
      raise WarmerConfigError(warmer_name, 'environment', f'expected a mapping, got {environment!r}')

    vpc = data.get('vpc')
    if vpc is False:
      # Detach the warmer from a VPC configured at provider level.
      vpc = {'securityGroupIds': [], 'subnetIds': []}

    return WarmerConfig(
      name=data.get('name', f"{service.get('service')}-{stage}-warmup-plugin-{warmer_name}"),
      folder_name=folder_name,
      path_handler=os.path.join(folder_name, 'index.warmUp'),
      clean_folder=data.get('cleanFolder', True),
      role=data.get('role'),
      role_name=data.get('roleName'),
      tags=data.get('tags'),
      vpc=vpc,
      events=events,
      architecture=data.get('architecture'),
      package=merge_package(folder_name, data.get('package')),
      memory_size=data.get('memorySize', 128),
      timeout=data.get('timeout', 10),
      environment=environment,
      tracing=data.get('tracing'),
      verbose=data.get('verbose', True),
      log_retention_in_days=data.get('logRetentionInDays'),
    )


def merge_package(folder_name: str, package: Optional[dict]) -> dict:
  default_patterns = ['!**', f"{folder_name.replace(os.sep, '/')}/**"]
  if not isinstance(package, dict):
    return {'individually': True, 'patterns': default_patterns}

  extra_patterns = [pattern for pattern in package.get('patterns', []) if pattern not in default_patterns]
  return {
    'individually': package.get('individually', True),
    'patterns': default_patterns + extra_patterns,
  }


def get_function_targets(
  service: dict,
  stage: str,
  warmer_name: str,
  warmer_options: dict,
) -> list[FunctionTarget]:
  targets = []
  for function_key, function in (service.get('functions') or {}).items():
    function = function or {}
    options = (function.get('warmup') or {}).get(warmer_name) or {}
    config = FunctionConfig.from_dict({**warmer_options, **options})
    if not config.is_enabled(stage):
      continue

    targets.append(FunctionTarget(
      name=function.get('name', f"{service.get('service')}-{stage}-{function_key}"),
      config=config,
    ))

  return targets


def get_warmers_config(service: dict, stage: str) -> dict[str, WarmerConfig]:
  """
  Resolves every warmer declared under custom.warmup in the service document. Function options are layered as
  built-in defaults, then the warmer's own options, then the function's warmup.<warmer> options.
  """
  warmers = {}
  for warmer_name, data in ((service.get('custom') or {}).get('warmup') or {}).items():
    data = data or {}
    warmer_config = WarmerConfig.from_dict(service, stage, warmer_name, data)
    warmer_config.functions = get_function_targets(service, stage, warmer_name, data)
    warmers[warmer_name] = warmer_config

  return warmers
