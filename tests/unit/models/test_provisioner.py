'''
Tests for finterole.models.provisioner
'''

import os
import unittest
from unittest import mock
from finterole import exceptions
from finterole import helpers
from finterole.models import provisioner as provisioner_module
from finterole.models.project_context import ProjectContext
from finterole.models.provision_request import ProvisionRequest
from finterole.models.provisioner import Provisioner
from tests.gcloud_fakes import get_gcloud_mock, get_reporter_mock, reported_text, called_method_names

#pylint: disable=too-many-public-methods
class TestProvisioner(unittest.TestCase):
    '''
    Tests for finterole.models.provisioner.Provisioner
    '''

    def setUp(self):
        self.reporter = get_reporter_mock()
        self.request = ProvisionRequest(organization_id='123456789012', project_id='my-project-id')
        self.context = ProjectContext(project_id='my-project-id')

    def _get_provisioner(self, gcloud):
        return Provisioner(gcloud_service=gcloud, reporter=self.reporter)

    def test_run_success_states(self):
        '''
        Tests Provisioner.run when every step succeeds

        It should finish in the done state and return the described role
        '''
        gcloud = get_gcloud_mock()
        provisioner = self._get_provisioner(gcloud)
        created_role = provisioner.run(self.request)
        assert provisioner.state == provisioner_module.STATE_DONE
        assert provisioner.failure_reason is None
        assert created_role == gcloud.describe_role.return_value
        assert provisioner.project_context.project_number == '424242424242'

    def test_run_call_order(self):
        '''
        Tests that read-only checks run before any mutating call, in pipeline order
        '''
        gcloud = get_gcloud_mock(api_enabled=False)
        self._get_provisioner(gcloud).run(self.request)
        assert called_method_names(gcloud) == [
            'is_installed', 'list_active_accounts', 'describe_project',
            'is_service_enabled', 'enable_service', 'create_role', 'describe_role']

    def test_run_scopes_calls_to_project(self):
        '''
        Tests that the resolved project is passed explicitly to later calls
        '''
        gcloud = get_gcloud_mock(api_enabled=False)
        self._get_provisioner(gcloud).run(self.request)
        gcloud.is_service_enabled.assert_called_with(api_name='iam.googleapis.com', project_id='my-project-id')
        gcloud.enable_service.assert_called_with(api_name='iam.googleapis.com', project_id='my-project-id')
        assert gcloud.create_role.call_args[1]['project_id'] == 'my-project-id'
        gcloud.describe_role.assert_called_with(role_id='FinteReadOnlyRole',
                                                organization_id='123456789012',
                                                project_id='my-project-id')

    def test_run_only_once(self):
        '''
        Tests that a Provisioner can't be run twice
        '''
        provisioner = self._get_provisioner(get_gcloud_mock())
        provisioner.run(self.request)
        with self.assertRaises(RuntimeError):
            provisioner.run(self.request)

    def test_run_invalid_request(self):
        '''
        Tests Provisioner.run with a request missing its project

        It should fail before calling gcloud at all
        '''
        gcloud = get_gcloud_mock()
        provisioner = self._get_provisioner(gcloud)
        with self.assertRaises(exceptions.MissingArgumentException):
            provisioner.run(ProvisionRequest(organization_id='123456789012'))
        assert provisioner.state == provisioner_module.STATE_FAILED
        assert isinstance(provisioner.failure_reason, exceptions.MissingArgumentException)
        assert gcloud.method_calls == []

    def test_check_environment_not_installed(self):
        '''
        Tests Provisioner.check_environment when gcloud is missing
        '''
        gcloud = get_gcloud_mock()
        gcloud.is_installed.return_value = False
        with self.assertRaises(exceptions.ClientNotInstalledException):
            self._get_provisioner(gcloud).check_environment()
        gcloud.list_active_accounts.assert_not_called()

    def test_check_environment_no_account(self):
        '''
        Tests Provisioner.check_environment when no account is active
        '''
        gcloud = get_gcloud_mock()
        gcloud.list_active_accounts.return_value = []
        with self.assertRaises(exceptions.NotAuthenticatedException):
            self._get_provisioner(gcloud).check_environment()

    def test_check_environment_auth_list_fails(self):
        '''
        Tests Provisioner.check_environment when listing accounts fails
        '''
        gcloud = get_gcloud_mock()
        gcloud.list_active_accounts.side_effect = exceptions.GcloudCommandException(['gcloud'], 1, 'boom')
        with self.assertRaises(exceptions.NotAuthenticatedException):
            self._get_provisioner(gcloud).check_environment()

    def test_resolve_project_not_found(self):
        '''
        Tests Provisioner.resolve_project when describing the project fails

        Missing and inaccessible projects should both raise ProjectNotFoundException
        with the same message
        '''
        messages = []
        for stderr in ['NOT_FOUND: project not found', 'PERMISSION_DENIED: no access']:
            gcloud = get_gcloud_mock()
            gcloud.describe_project.side_effect = exceptions.GcloudCommandException(['gcloud'], 1, stderr)
            with self.assertRaises(exceptions.ProjectNotFoundException) as context:
                self._get_provisioner(gcloud).resolve_project('nonexistent-project')
            messages.append(str(context.exception))
        assert messages[0] == messages[1]
        assert 'nonexistent-project' in messages[0]

    def test_resolve_project_context(self):
        '''
        Tests Provisioner.resolve_project builds the ProjectContext from the describe response
        '''
        context = self._get_provisioner(get_gcloud_mock()).resolve_project('my-project-id')
        assert context.project_id == 'my-project-id'
        assert context.name == 'My Project'

    def test_activate_api_already_enabled(self):
        '''
        Tests Provisioner.activate_api when the API is already enabled

        It should not try to enable it
        '''
        gcloud = get_gcloud_mock(api_enabled=True)
        assert self._get_provisioner(gcloud).activate_api(self.context) is False
        gcloud.enable_service.assert_not_called()
        self.reporter.success.assert_called_with('%s is already enabled', 'iam.googleapis.com')

    def test_activate_api_enables(self):
        '''
        Tests Provisioner.activate_api when the API is disabled and enabling succeeds
        '''
        gcloud = get_gcloud_mock(api_enabled=False)
        assert self._get_provisioner(gcloud).activate_api(self.context) is True
        gcloud.enable_service.assert_called_once_with(api_name='iam.googleapis.com',
                                                      project_id='my-project-id')
        self.reporter.warning.assert_called_once()

    def test_activate_api_listing_fails(self):
        '''
        Tests Provisioner.activate_api when listing services fails

        It should treat the API as not enabled and try to enable it
        '''
        gcloud = get_gcloud_mock()
        gcloud.is_service_enabled.side_effect = exceptions.GcloudCommandException(['gcloud'], 1, 'boom')
        assert self._get_provisioner(gcloud).activate_api(self.context) is True
        gcloud.enable_service.assert_called_once()

    def test_activate_api_enable_fails(self):
        '''
        Tests Provisioner.activate_api when enabling the API is rejected

        It should raise ApiActivationFailedException with the manual command
        '''
        gcloud = get_gcloud_mock(api_enabled=False)
        gcloud.enable_service.side_effect = exceptions.GcloudCommandException(['gcloud'], 1, 'denied')
        with self.assertRaises(exceptions.ApiActivationFailedException) as context:
            self._get_provisioner(gcloud).activate_api(self.context)
        assert context.exception.remediation == \
            '  gcloud services enable iam.googleapis.com --project=my-project-id'
        gcloud.enable_service.assert_called_once()

    def test_run_api_failure_skips_role(self):
        '''
        Tests that a failed API activation stops the run before the role is defined
        '''
        gcloud = get_gcloud_mock(api_enabled=False)
        gcloud.enable_service.side_effect = exceptions.GcloudCommandException(['gcloud'], 1, 'denied')
        provisioner = self._get_provisioner(gcloud)
        with mock.patch.object(helpers, 'transient_file') as transient_file_mock:
            with self.assertRaises(exceptions.ApiActivationFailedException):
                provisioner.run(self.request)
            transient_file_mock.assert_not_called()
        gcloud.create_role.assert_not_called()
        assert provisioner.state == provisioner_module.STATE_FAILED

    def test_role_file_contents_and_cleanup(self):
        '''
        Tests that create_role gets a role definition file with the fixed
        permissions and that the file is gone after the run
        '''
        seen = {}
        def _create_role(role_id, organization_id, role_file, project_id):
            seen['path'] = role_file
            with open(role_file, 'r') as file_handle:
                seen['document'] = helpers.ordered_yaml_load(file_handle)
            return None
        gcloud = get_gcloud_mock(create_role=mock.Mock(side_effect=_create_role))
        self._get_provisioner(gcloud).run(self.request)
        assert len(seen['document']['includedPermissions']) == 20
        assert seen['document']['stage'] == 'GA'
        assert not os.path.exists(seen['path'])

    def test_role_file_removed_on_failure(self):
        '''
        Tests that the role definition file is removed when creation fails
        '''
        seen = {}
        def _create_role(role_id, organization_id, role_file, project_id):
            seen['path'] = role_file
            raise exceptions.GcloudCommandException(['gcloud'], 1, 'ALREADY_EXISTS')
        gcloud = get_gcloud_mock(create_role=mock.Mock(side_effect=_create_role))
        with self.assertRaises(exceptions.RoleCreationFailedException):
            self._get_provisioner(gcloud).run(self.request)
        assert not os.path.exists(seen['path'])

    def test_termination_signal_during_run(self):
        '''
        Tests that a TerminationSignal raised mid-run fails the run with
        ProvisioningInterruptedException and removes the role definition file
        '''
        seen = {}
        def _create_role(role_id, organization_id, role_file, project_id):
            seen['path'] = role_file
            raise exceptions.TerminationSignal('SIGTERM')
        gcloud = get_gcloud_mock(create_role=mock.Mock(side_effect=_create_role))
        provisioner = self._get_provisioner(gcloud)
        with self.assertRaises(exceptions.ProvisioningInterruptedException) as context:
            provisioner.run(self.request)
        assert context.exception.signal_name == 'SIGTERM'
        assert provisioner.state == provisioner_module.STATE_FAILED
        assert not os.path.exists(seen['path'])
        gcloud.describe_role.assert_not_called()

    def test_termination_signal_not_caught_as_exception(self):
        '''
        Tests that TerminationSignal is not an Exception, so handlers that catch
        Exception (such as logging handlers) let it through
        '''
        assert not issubclass(exceptions.TerminationSignal, Exception)
        assert issubclass(exceptions.TerminationSignal, BaseException)

    def test_role_file_removed_on_interrupt(self):
        '''
        Tests that an interrupt during creation fails the run and removes the file
        '''
        seen = {}
        def _create_role(role_id, organization_id, role_file, project_id):
            seen['path'] = role_file
            raise KeyboardInterrupt()
        gcloud = get_gcloud_mock(create_role=mock.Mock(side_effect=_create_role))
        provisioner = self._get_provisioner(gcloud)
        with self.assertRaises(exceptions.ProvisioningInterruptedException):
            provisioner.run(self.request)
        assert provisioner.state == provisioner_module.STATE_FAILED
        assert not os.path.exists(seen['path'])

    def test_create_role_failure_no_upsert(self):
        '''
        Tests Provisioner.run when the role already exists

        It should raise RoleCreationFailedException and never describe or update the role
        '''
        gcloud = get_gcloud_mock()
        gcloud.create_role.side_effect = exceptions.GcloudCommandException(
            ['gcloud'], 1, 'ERROR: (gcloud.iam.roles.create) ALREADY_EXISTS: Role already exists')
        with self.assertRaises(exceptions.RoleCreationFailedException) as context:
            self._get_provisioner(gcloud).run(self.request)
        assert 'ALREADY_EXISTS' in str(context.exception)
        assert called_method_names(gcloud)[-1] == 'create_role'
        gcloud.create_role.assert_called_once()

    def test_describe_after_create_fails(self):
        '''
        Tests Provisioner.run when the created role can't be described

        It should raise RoleDescribeFailedException saying the role was created,
        not that creation failed
        '''
        gcloud = get_gcloud_mock()
        gcloud.describe_role.side_effect = exceptions.GcloudCommandException(['gcloud'], 1, 'boom')
        provisioner = self._get_provisioner(gcloud)
        with self.assertRaises(exceptions.RoleDescribeFailedException) as context:
            provisioner.run(self.request)
        message = str(context.exception)
        assert "Custom role 'FinteReadOnlyRole' was created in organization '123456789012'" in message
        assert 'Failed to create' not in message
        assert provisioner.state == provisioner_module.STATE_FAILED
        gcloud.create_role.assert_called_once()

    def test_drift_warning(self):
        '''
        Tests that a warning is reported when the described role doesn't match the definition
        '''
        gcloud = get_gcloud_mock()
        gcloud.describe_role.return_value = {'title': 'FinteReadOnlyRole', 'stage': 'GA',
                                             'includedPermissions': ['compute.regions.list']}
        self._get_provisioner(gcloud).run(self.request)
        warnings = [call[1][0] for call in self.reporter.warning.mock_calls]
        assert 'The created role differs from the submitted definition: %s' in warnings

    def test_no_drift_warning(self):
        '''
        Tests that no warning is reported when the described role matches,
        even with permissions in another order
        '''
        gcloud = get_gcloud_mock()
        gcloud.describe_role.return_value['includedPermissions'].reverse()
        self._get_provisioner(gcloud).run(self.request)
        self.reporter.warning.assert_not_called()

    def test_binding_hints(self):
        '''
        Tests that the completion output contains the user and service account binding commands
        '''
        self._get_provisioner(get_gcloud_mock()).run(self.request)
        output = reported_text(self.reporter)
        assert output.count('gcloud organizations add-iam-policy-binding 123456789012') == 2
        assert '--member="user:email@domain.com"' in output
        assert '--member="serviceAccount:service-account@project.iam.gserviceaccount.com"' in output
        assert output.count('--role="organizations/123456789012/roles/FinteReadOnlyRole"') == 2

    def test_binding_command(self):
        '''
        Tests finterole.models.provisioner.binding_command
        '''
        command = provisioner_module.binding_command(
            'gcloud', '1', 'user:a@b.c', 'organizations/1/roles/R')
        assert command == ('  gcloud organizations add-iam-policy-binding 1 \\\n'
                           '    --member="user:a@b.c" \\\n'
                           '    --role="organizations/1/roles/R"')
