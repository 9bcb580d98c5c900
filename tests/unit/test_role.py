from unittest import TestCase

from openwarmup.role import add_warmer_role_to_resources, role_logical_id
from openwarmup.warmers import FunctionConfig, FunctionTarget, WarmerConfig


def make_warmer_config(functions: list[str], **kwargs) -> WarmerConfig:
  return WarmerConfig(
    name='my-service-dev-warmup-plugin-default',
    folder_name='.warmup/default',
    path_handler='.warmup/default/index.warmUp',
    functions=[FunctionTarget(name=name, config=FunctionConfig()) for name in functions],
    **kwargs,
  )


class RoleTest(TestCase):
  def setUp(self):
    self.service = {'service': 'my-service', 'functions': {}}

  def policy_statements(self, role_id: str) -> list[dict]:
    properties = self.service['resources']['Resources'][role_id]['Properties']
    return properties['Policies'][0]['PolicyDocument']['Statement']

  def test_role_logical_id(self):
    self.assertEqual('WarmUpPluginDefaultRole', role_logical_id('default'))
    self.assertEqual('WarmUpPluginOfficeHoursRole', role_logical_id('officeHours'))

  def test_sets_role_on_warmer_config(self):
    warmer_config = make_warmer_config(['a'])
    add_warmer_role_to_resources(self.service, 'dev', 'officeHours', warmer_config)

    self.assertEqual('WarmUpPluginOfficeHoursRole', warmer_config.role)
    self.assertIn('WarmUpPluginOfficeHoursRole', self.service['resources']['Resources'])

  def test_creates_resource_containers(self):
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config(['a']))
    self.assertEqual(['WarmUpPluginDefaultRole'], list(self.service['resources']['Resources']))

  def test_keeps_existing_resources(self):
    self.service['resources'] = {'Resources': {'Bucket': {'Type': 'AWS::S3::Bucket'}}, 'Outputs': {}}
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config(['a']))

    self.assertEqual({'Type': 'AWS::S3::Bucket'}, self.service['resources']['Resources']['Bucket'])
    self.assertEqual({}, self.service['resources']['Outputs'])

  def test_replaces_non_mapping_resources(self):
    self.service['resources'] = None
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config(['a']))
    self.assertIn('WarmUpPluginDefaultRole', self.service['resources']['Resources'])

  def test_role_document(self):
    add_warmer_role_to_resources(self.service, 'dev', 'Default', make_warmer_config(['a']))
    role = self.service['resources']['Resources']['WarmUpPluginDefaultRole']

    self.assertEqual('AWS::IAM::Role', role['Type'])
    self.assertEqual('/', role['Properties']['Path'])
    self.assertEqual(
      {'Fn::Join': ['-', ['my-service', 'dev', {'Ref': 'AWS::Region'}, 'default', 'role']]},
      role['Properties']['RoleName'],
    )
    self.assertEqual(
      {
        'Version': '2012-10-17',
        'Statement': [
          {
            'Effect': 'Allow',
            'Principal': {'Service': ['lambda.amazonaws.com']},
            'Action': 'sts:AssumeRole',
          },
        ],
      },
      role['Properties']['AssumeRolePolicyDocument'],
    )
    self.assertEqual(
      {'Fn::Join': ['-', ['my-service', 'dev', 'warmer', 'default', 'policy']]},
      role['Properties']['Policies'][0]['PolicyName'],
    )

  def test_role_name_override(self):
    warmer_config = make_warmer_config(['a'], role_name='custom-role')
    add_warmer_role_to_resources(self.service, 'dev', 'default', warmer_config)

    role = self.service['resources']['Resources']['WarmUpPluginDefaultRole']
    self.assertEqual('custom-role', role['Properties']['RoleName'])

  def test_log_permissions(self):
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config(['a']))
    statements = self.policy_statements('WarmUpPluginDefaultRole')

    self.assertEqual(['logs:CreateLogGroup', 'logs:CreateLogStream'], statements[0]['Action'])
    self.assertEqual(
      [{
        'Fn::Sub': 'arn:${AWS::Partition}:logs:${AWS::Region}:${AWS::AccountId}:log-group:'
                   '/aws/lambda/my-service-dev-warmup-plugin-default:*'
      }],
      statements[0]['Resource'],
    )
    self.assertEqual(['logs:PutLogEvents'], statements[1]['Action'])
    self.assertEqual(
      [{
        'Fn::Sub': 'arn:${AWS::Partition}:logs:${AWS::Region}:${AWS::AccountId}:log-group:'
                   '/aws/lambda/my-service-dev-warmup-plugin-default:*:*'
      }],
      statements[1]['Resource'],
    )

  def test_invoke_permission_per_function_in_order(self):
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config(['b-fn', 'a-fn', 'c-fn']))
    statement = self.policy_statements('WarmUpPluginDefaultRole')[2]

    self.assertEqual(['lambda:InvokeFunction'], statement['Action'])
    self.assertEqual(
      [
        {'Fn::Sub': f'arn:${{AWS::Partition}}:lambda:${{AWS::Region}}:${{AWS::AccountId}}:function:{name}*'}
        for name in ['b-fn', 'a-fn', 'c-fn']
      ],
      statement['Resource'],
    )

  def test_empty_function_list_grants_no_invoke(self):
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config([]))
    self.assertEqual([], self.policy_statements('WarmUpPluginDefaultRole')[2]['Resource'])

  def test_network_interface_permissions_always_granted(self):
    add_warmer_role_to_resources(self.service, 'dev', 'default', make_warmer_config(['a']))
    statement = self.policy_statements('WarmUpPluginDefaultRole')[3]

    self.assertEqual(
      [
        'ec2:CreateNetworkInterface',
        'ec2:DescribeNetworkInterfaces',
        'ec2:DetachNetworkInterface',
        'ec2:DeleteNetworkInterface',
      ],
      statement['Action'],
    )
    self.assertEqual('*', statement['Resource'])
