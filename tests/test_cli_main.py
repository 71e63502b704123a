"""End-to-end tests for the CLI commands with mocked inventory."""

import json
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from aws_reservations import __version__
from aws_reservations.cli.main import (
    EXIT_AUTH_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_DATA_ERROR,
    EXIT_SERVICE_ERROR,
    EXIT_SUCCESS,
    EXIT_USER_CANCELLED,
    cli,
)
from aws_reservations.core.config import Config
from aws_reservations.core.exceptions import (
    AuthenticationError,
    ServiceError,
    UnknownPurchaseMethodError,
)
from aws_reservations.core.purchase_method import EC2PurchaseMethod, RDSPurchaseMethod
from aws_reservations.services.inventory import DBInventory, EC2Inventory, SavingsPlansInventory

from factories import (
    make_asg,
    make_db_instance,
    make_instance,
    make_node_group,
    make_offering,
    make_reserved_db_instance,
    make_savings_plan,
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def loader():
    """Patch out AWS access; yields the InventoryLoader instance commands will use."""
    with patch('aws_reservations.cli.main.SessionFactory') as MockSessionFactory, \
         patch('aws_reservations.cli.main.InventoryLoader') as MockInventoryLoader:
        mock_loader = Mock()
        MockInventoryLoader.return_value = mock_loader
        mock_loader.session_factory = MockSessionFactory
        mock_loader.loader_class = MockInventoryLoader
        yield mock_loader


def invoke(runner, config_manager, args):
    return runner.invoke(cli, args, obj={'config_manager': config_manager})


class TestCLIEntryPoint:

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == EXIT_SUCCESS
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == EXIT_SUCCESS
        for command in ['rds', 'compute-savings-plans', 'ec2-all', 'ec2-savings-plans', 'configure']:
            assert command in result.output

    def test_region_option_reaches_session_and_loader(self, runner, loader, temp_config_manager):
        loader.load_db_inventory.return_value = DBInventory(db_instances=(), reserved_db_instances=())

        result = invoke(runner, temp_config_manager, ['--region', 'eu-west-1', 'rds'])

        assert result.exit_code == EXIT_SUCCESS
        loader.session_factory.return_value.get_aws_session.assert_called_once_with('eu-west-1')
        args = loader.loader_class.call_args.args
        assert args[1] == 'eu-west-1'

    def test_configured_region_is_used_by_default(self, runner, loader, temp_config_manager):
        temp_config_manager.save_config(Config(default_region='ap-northeast-1'))
        loader.load_db_inventory.return_value = DBInventory(db_instances=(), reserved_db_instances=())

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == EXIT_SUCCESS
        loader.session_factory.return_value.get_aws_session.assert_called_once_with('ap-northeast-1')


class TestRDSCommand:

    def test_reports_units_to_purchase(self, runner, loader, temp_config_manager):
        loader.load_db_inventory.return_value = DBInventory(
            db_instances=(
                make_db_instance(identifier='orders', instance_class='db.r5.large'),
                make_db_instance(identifier='scratch', purchase_method=RDSPurchaseMethod.NEEDLESS),
                make_db_instance(identifier='legacy', purchase_method=RDSPurchaseMethod.UNDEFINED),
            ),
            reserved_db_instances=(),
        )

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == EXIT_SUCCESS
        assert 'db.r5/mysql/SingleAZ' in result.output
        assert 'orders (db.r5.large) => 4' in result.output
        assert 'You need to purchase 4 unit' in result.output
        assert 'scratch' in result.output
        assert 'legacy' in result.output

    def test_reports_covered_and_over_purchased(self, runner, loader, temp_config_manager):
        loader.load_db_inventory.return_value = DBInventory(
            db_instances=(make_db_instance(instance_class='db.r5.xlarge', multi_az=True),),
            reserved_db_instances=(
                make_reserved_db_instance(lease_id='lease-a', instance_class='db.r5.xlarge', multi_az=True),
                make_reserved_db_instance(lease_id='lease-b', instance_class='db.m5.large'),
            ),
        )

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == EXIT_SUCCESS
        assert 'You have already purchased required unit' in result.output
        assert 'Over purchased 4 unit' in result.output

    def test_engine_mapping_from_config(self, runner, loader, temp_config_manager):
        temp_config_manager.save_config(Config(engine_product_descriptions={'postgres': 'postgresql'}))
        loader.load_db_inventory.return_value = DBInventory(
            db_instances=(make_db_instance(engine='postgres'),),
            reserved_db_instances=(make_reserved_db_instance(product_description='postgresql'),),
        )

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == EXIT_SUCCESS
        assert 'db.r5/postgresql/SingleAZ' in result.output
        assert 'You have already purchased required unit' in result.output

    def test_unknown_size_exits_with_data_error(self, runner, loader, temp_config_manager):
        loader.load_db_inventory.return_value = DBInventory(
            db_instances=(make_db_instance(instance_class='db.r5.24xlarge'),),
            reserved_db_instances=(),
        )

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == EXIT_DATA_ERROR
        assert 'Not implemented' in result.output


class TestComputeSavingsPlansCommand:

    def _inventory(self, loader, savings_plans, offerings=None):
        loader.load_ec2_inventory.return_value = EC2Inventory(
            instances=(make_instance(purchase_method=EC2PurchaseMethod.NEEDLESS),),
            asgs=(make_asg(name='workers', min_size=3, instance_type='m5.2xlarge'),),
            node_groups=(),
        )
        loader.load_savings_plans_inventory.return_value = SavingsPlansInventory(
            offerings=offerings if offerings is not None else {'m5.2xlarge': make_offering('m5.2xlarge', '0.30')},
            savings_plans=tuple(savings_plans),
        )

    def test_reports_amount_to_purchase(self, runner, loader, temp_config_manager):
        self._inventory(loader, [make_savings_plan('sp-1', '0.50')])

        result = invoke(runner, temp_config_manager, ['compute-savings-plans'])

        assert result.exit_code == EXIT_SUCCESS
        assert 'workers' in result.output
        assert 'Total: $0.9/hour' in result.output
        assert 'sp-1' in result.output
        assert 'You need to purchase additional $0.4/hour' in result.output

    def test_reports_covered(self, runner, loader, temp_config_manager):
        self._inventory(loader, [make_savings_plan('sp-1', '0.90')])

        result = invoke(runner, temp_config_manager, ['compute-savings-plans'])

        assert result.exit_code == EXIT_SUCCESS
        assert 'You have already purchased required Savings Plans' in result.output

    def test_missing_offering_exits_with_data_error(self, runner, loader, temp_config_manager):
        self._inventory(loader, [], offerings={})

        result = invoke(runner, temp_config_manager, ['compute-savings-plans'])

        assert result.exit_code == EXIT_DATA_ERROR
        assert 'm5.2xlarge' in result.output


class TestEC2Commands:

    def test_ec2_all_lists_every_purchase_method(self, runner, loader, temp_config_manager):
        loader.load_ec2_inventory.return_value = EC2Inventory(
            instances=(make_instance(name='web'),),
            asgs=(make_asg(name='batch', purchase_method=EC2PurchaseMethod.SPOT_INSTANCES),),
            node_groups=(make_node_group(purchase_method=EC2PurchaseMethod.UNDEFINED),),
        )

        result = invoke(runner, temp_config_manager, ['ec2-all'])

        assert result.exit_code == EXIT_SUCCESS
        for method in EC2PurchaseMethod:
            assert method.value in result.output
        assert 'web' in result.output
        assert 'batch' in result.output

    def test_ec2_savings_plans_prints_families_as_json(self, runner, loader, temp_config_manager):
        loader.load_ec2_inventory.return_value = EC2Inventory(
            instances=(
                make_instance(instance_id='i-a', name='a', instance_type='m5.large',
                              purchase_method=EC2PurchaseMethod.EC2_INSTANCE_SAVINGS_PLANS),
                make_instance(instance_id='i-b', name='b', instance_type='c5.large',
                              purchase_method=EC2PurchaseMethod.EC2_INSTANCE_SAVINGS_PLANS),
                make_instance(instance_id='i-c', name='c', instance_type='r5.large'),
            ),
            asgs=(),
            node_groups=(),
        )

        result = invoke(runner, temp_config_manager, ['ec2-savings-plans'])

        assert result.exit_code == EXIT_SUCCESS
        families = json.loads(result.output)
        assert set(families) == {'m5', 'c5'}
        assert [i['id'] for i in families['m5']['ec2']] == ['i-a']

    def test_ec2_savings_plans_with_asg_is_not_implemented(self, runner, loader, temp_config_manager):
        loader.load_ec2_inventory.return_value = EC2Inventory(
            instances=(),
            asgs=(make_asg(purchase_method=EC2PurchaseMethod.EC2_INSTANCE_SAVINGS_PLANS),),
            node_groups=(),
        )

        result = invoke(runner, temp_config_manager, ['ec2-savings-plans'])

        assert result.exit_code == EXIT_DATA_ERROR
        assert 'Auto Scaling Group' in result.output


class TestErrorHandling:

    @pytest.mark.parametrize('error,exit_code', [
        (UnknownPurchaseMethodError('Reserved'), EXIT_CONFIG_ERROR),
        (AuthenticationError('expired'), EXIT_AUTH_ERROR),
        (ServiceError('AWS rds describe_db_instances failed'), EXIT_SERVICE_ERROR),
        (KeyboardInterrupt(), EXIT_USER_CANCELLED),
    ])
    def test_errors_map_to_exit_codes(self, runner, loader, temp_config_manager, error, exit_code):
        loader.load_db_inventory.side_effect = error

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == exit_code

    def test_unknown_tag_value_is_reported(self, runner, loader, temp_config_manager):
        loader.load_ec2_inventory.side_effect = UnknownPurchaseMethodError('Reserved')

        result = invoke(runner, temp_config_manager, ['ec2-all'])

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert 'Unknown ReservationPurchaseMethod' in result.output

    def test_corrupted_config_exits_with_config_error(self, runner, loader, temp_config_manager):
        temp_config_manager.config_dir.mkdir(parents=True, exist_ok=True)
        temp_config_manager.config_file.write_text('{broken')

        result = invoke(runner, temp_config_manager, ['rds'])

        assert result.exit_code == EXIT_CONFIG_ERROR
        loader.load_db_inventory.assert_not_called()


class TestConfigureCommand:

    def test_saves_settings(self, runner, temp_config_manager):
        result = invoke(runner, temp_config_manager, [
            'configure',
            '--default-region', 'eu-west-1',
            '--role-arn', 'arn:aws:iam::123456789012:role/ReservationsReadOnly',
            '--eks-cluster-tag', 'stage=production',
            '--engine-mapping', 'postgres=postgresql',
        ])

        assert result.exit_code == EXIT_SUCCESS
        assert 'Configuration saved' in result.output
        config = temp_config_manager.load_config()
        assert config.default_region == 'eu-west-1'
        assert config.iam_role_arn == 'arn:aws:iam::123456789012:role/ReservationsReadOnly'
        assert config.eks_cluster_tag_filters == {'stage': 'production'}
        assert config.engine_product_descriptions == {'postgres': 'postgresql'}

    def test_engine_mappings_accumulate(self, runner, temp_config_manager):
        invoke(runner, temp_config_manager, ['configure', '--engine-mapping', 'postgres=postgresql'])
        invoke(runner, temp_config_manager, ['configure', '--engine-mapping', 'mariadb=mariadb'])

        config = temp_config_manager.load_config()
        assert config.engine_product_descriptions == {'postgres': 'postgresql', 'mariadb': 'mariadb'}

    def test_invalid_region_is_rejected(self, runner, temp_config_manager):
        result = invoke(runner, temp_config_manager, ['configure', '--default-region', 'nowhere'])

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert not temp_config_manager.config_exists()

    def test_malformed_pair_is_usage_error(self, runner, temp_config_manager):
        result = invoke(runner, temp_config_manager, ['configure', '--eks-cluster-tag', 'stage'])

        assert result.exit_code == 2
        assert not temp_config_manager.config_exists()
