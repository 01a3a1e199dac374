'''
Provides GcloudService
'''

import json
import shutil
import subprocess
from finterole import exceptions
from finterole.log_handling import LOGGER as logger

DEFAULT_GCLOUD_BINARY = 'gcloud'

class GcloudService(object):
    '''
    Runs gcloud commands for the provisioner. Each public method maps to one
    gcloud call; failures surface as
    finterole.exceptions.GcloudCommandException and are left to the caller
    to interpret.
    '''

    def __init__(self, binary=DEFAULT_GCLOUD_BINARY):
        self.binary = binary

    def is_installed(self):
        '''
        Returns True if the gcloud binary can be found on the PATH
        '''
        return shutil.which(self.binary) is not None

    def run(self, args, expect_json=False):
        '''
        Runs gcloud with the provided arguments and returns its stdout, or the
        parsed JSON document when expect_json is set.
        '''
        command = [self.binary] + list(args)
        if expect_json:
            command.append('--format=json')
        logger.debug('Running: %s', ' '.join(command))
        try:
            process = subprocess.run(command, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            raise exceptions.ClientNotInstalledException(self.binary)
        if process.returncode != 0:
            raise exceptions.GcloudCommandException(command, process.returncode, process.stderr)
        if not expect_json:
            return process.stdout
        if not process.stdout.strip():
            return {}
        try:
            return json.loads(process.stdout)
        except ValueError as err:
            raise exceptions.GcloudCommandException(
                command, process.returncode, 'Could not parse JSON output: %s' % err)

    def _run_lines(self, args):
        output = self.run(args)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def list_active_accounts(self):
        '''
        Returns the accounts gcloud reports as actively authenticated
        '''
        return self._run_lines(['auth', 'list', '--filter=status:ACTIVE', '--format=value(account)'])

    def describe_project(self, project_id):
        return self.run(['projects', 'describe', project_id], expect_json=True)

    def list_enabled_services(self, api_name, project_id):
        '''
        Returns the names of enabled services on the project that match api_name
        '''
        return self._run_lines(['services', 'list', '--enabled',
                                '--filter=name:%s' % api_name,
                                '--format=value(name)',
                                '--project=%s' % project_id])

    def is_service_enabled(self, api_name, project_id):
        '''
        Returns True if api_name is among the enabled services of the project.
        Service names may come back bare or as projects/<number>/services/<api>.
        '''
        for name in self.list_enabled_services(api_name=api_name, project_id=project_id):
            if name == api_name or name.endswith('/%s' % api_name):
                return True
        return False

    def enable_service(self, api_name, project_id):
        self.run(['services', 'enable', api_name, '--project=%s' % project_id])

    def create_role(self, role_id, organization_id, role_file, project_id):
        '''
        Creates a custom role at organization scope from a role definition
        file. Fails if the role already exists. The created role is read
        back with #describe_role.
        '''
        self.run(['iam', 'roles', 'create', role_id,
                  '--organization=%s' % organization_id,
                  '--file=%s' % role_file,
                  '--quiet',
                  '--project=%s' % project_id])

    def describe_role(self, role_id, organization_id, project_id):
        return self.run(['iam', 'roles', 'describe', role_id,
                         '--organization=%s' % organization_id,
                         '--project=%s' % project_id], expect_json=True)
