from openwarmup.warmers import WarmerConfig, capitalize


POLICY_VERSION = '2012-10-17'

NETWORK_INTERFACE_ACTIONS = [
  'ec2:CreateNetworkInterface',
  'ec2:DescribeNetworkInterfaces',
  'ec2:DetachNetworkInterface',
  'ec2:DeleteNetworkInterface',
]


def role_logical_id(warmer_name: str) -> str:
  return f'WarmUpPlugin{capitalize(warmer_name)}Role'


def sub_arn(service: str, resource: str) -> dict:
  return {'Fn::Sub': f'arn:${{AWS::Partition}}:{service}:${{AWS::Region}}:${{AWS::AccountId}}:{resource}'}


def add_warmer_role_to_resources(service: dict, stage: str, warmer_name: str, warmer_config: WarmerConfig) -> None:
  """
  Adds a dedicated IAM role for the warmer to the service resources and points the warmer at it.

  The policy allows the warmer to write its own logs, invoke every target function (including versions and aliases)
  and manage network interfaces, which is needed whenever the warmer runs inside a VPC.
  """
  warmer_config.role = role_logical_id(warmer_name)

  if not isinstance(service.get('resources'), dict):
    service['resources'] = {}

  if not isinstance(service['resources'].get('Resources'), dict):
    service['resources']['Resources'] = {}

  log_group = f'log-group:/aws/lambda/{warmer_config.name}'
  service['resources']['Resources'][warmer_config.role] = {
    'Type': 'AWS::IAM::Role',
    'Properties': {
      'Path': '/',
      'RoleName': warmer_config.role_name or {
        'Fn::Join': [
          '-',
          [service.get('service'), stage, {'Ref': 'AWS::Region'}, warmer_name.lower(), 'role'],
        ],
      },
      'AssumeRolePolicyDocument': {
        'Version': POLICY_VERSION,
        'Statement': [
          {
            'Effect': 'Allow',
            'Principal': {
              'Service': ['lambda.amazonaws.com'],
            },
            'Action': 'sts:AssumeRole',
          },
        ],
      },
      'Policies': [
        {
          'PolicyName': {
            'Fn::Join': [
              '-',
              [service.get('service'), stage, 'warmer', warmer_name.lower(), 'policy'],
            ],
          },
          'PolicyDocument': {
            'Version': POLICY_VERSION,
            'Statement': [
              {
                'Effect': 'Allow',
                'Action': ['logs:CreateLogGroup', 'logs:CreateLogStream'],
                'Resource': [sub_arn('logs', f'{log_group}:*')],
              },
              {
                'Effect': 'Allow',
                'Action': ['logs:PutLogEvents'],
                'Resource': [sub_arn('logs', f'{log_group}:*:*')],
              },
              {
                'Effect': 'Allow',
                'Action': ['lambda:InvokeFunction'],
                'Resource': [
                  sub_arn('lambda', f'function:{function.name}*') for function in warmer_config.functions or []
                ],
              },
              {
                'Effect': 'Allow',
                'Action': list(NETWORK_INTERFACE_ACTIONS),
                'Resource': '*',
              },
            ],
          },
        },
      ],
    },
  }
