from dataclasses import dataclass
import json
import os
from typing import Optional, Self

import boto3


DEFAULT_STAGE = 'dev'
DEFAULT_REGION = 'us-east-1'


@dataclass(kw_only=True)
class Config:
  """
  The path to the service definition, a JSON rendering of serverless.yml.
  """
  service_path: str

  """
  The directory the warmer folders are created in. Defaults to the service definition's directory.
  """
  service_dir: str

  """
  The path the service definition, including the generated warmers, is written to.
  """
  output_path: str

  """
  Optional - The stage to generate for. Falls back to provider.stage, then "dev".
  """
  stage: Optional[str] = None

  """
  Optional - The region the warmers invoke functions in. Falls back to provider.region, then the AWS profile.
  """
  region: Optional[str] = None

  """
  Creates a Config instance from an open-warmup.config.json file. open-warmup.config.json file structure:
  {
    "service-path": "path/to/serverless.json",
    "service-dir": "path/to/service",
    "output-path": "path/to/output.json",
    "stage": "dev",
    "region": "us-east-1"
  }
  """
  @staticmethod
  def from_path(path: Optional[str] = None) -> Self:
    if not path:
      path = os.path.join(os.getcwd(), 'open-warmup.config.json')

    if os.path.exists(path):
      with open(path, 'r') as file:
        data = json.load(file)

        base_path = os.path.dirname(os.path.abspath(path))
        service_path = os.path.join(base_path, data.get('service-path', 'serverless.json'))
        service_dir = os.path.join(base_path, data.get('service-dir', os.path.dirname(service_path)))
        return Config(
          stage=data.get('stage'),
          region=data.get('region'),
          service_dir=service_dir,
          service_path=service_path,
          output_path=os.path.join(
            base_path,
            data.get('output-path', os.path.join(service_dir, '.warmup', 'open-warmup.output.json')),
          ),
        )

    print(f'OpenWarmUp config not found at {path}. Using system defaults.')

    return Config(
      service_dir=os.getcwd(),
      service_path=os.path.join(os.getcwd(), 'serverless.json'),
      output_path=os.path.join(os.getcwd(), '.warmup', 'open-warmup.output.json'),
    )

  def resolve_stage(self, service: dict) -> str:
    return self.stage or (service.get('provider') or {}).get('stage') or DEFAULT_STAGE

  def resolve_region(self, service: dict) -> str:
    region = self.region or (service.get('provider') or {}).get('region')
    if region:
      return region

    return boto3.session.Session().region_name or DEFAULT_REGION
