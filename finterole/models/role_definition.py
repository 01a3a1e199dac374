'''
Provides RoleDefinition and the FinteReadOnlyRole constants
'''
from collections import OrderedDict
from finterole import exceptions, helpers

ROLE_STAGES = ('GA', 'BETA', 'ALPHA', 'DISABLED')
DEFAULT_STAGE = 'GA'

FINTE_READ_ONLY_ROLE_ID = 'FinteReadOnlyRole'
FINTE_READ_ONLY_ROLE_TITLE = 'FinteReadOnlyRole'
FINTE_READ_ONLY_ROLE_DESCRIPTION = 'Custom read-only role for Finte Test services with specific permissions'
FINTE_READ_ONLY_PERMISSIONS = (
    'cloudasset.assets.exportCloudresourcemanagerFolders',
    'cloudasset.assets.exportCloudresourcemanagerOrganizations',
    'cloudasset.assets.exportCloudresourcemanagerProjects',
    'cloudasset.assets.exportResource',
    'cloudasset.assets.listCloudresourcemanagerFolders',
    'cloudasset.assets.listCloudresourcemanagerOrganizations',
    'cloudasset.assets.listCloudresourcemanagerProjects',
    'cloudasset.assets.listResource',
    'cloudasset.assets.searchAllResources',
    'compute.commitments.get',
    'compute.commitments.list',
    'compute.regions.list',
    'monitoring.metricDescriptors.list',
    'monitoring.timeSeries.list',
    'resourcemanager.folders.get',
    'resourcemanager.folders.list',
    'resourcemanager.organizations.get',
    'resourcemanager.projects.get',
    'resourcemanager.projects.getIamPolicy',
    'resourcemanager.projects.list')

class RoleDefinition(object):
    '''
    Models a custom IAM role definition as submitted to
    `gcloud iam roles create --file`.

    #### Instance attributes

    - `role_id`: The id of the role within its organization.
    - `title`: The human readable title of the role.
    - `description`: The description shown for the role.
    - `stage`: The launch stage of the role, one of `ROLE_STAGES`.
    - `permissions`: A tuple of permission names, in submission order.
    Duplicates are dropped, keeping the first occurrence.
    '''

    #pylint: disable=too-many-arguments
    def __init__(self, role_id, title, description, permissions, stage=DEFAULT_STAGE):
        if stage not in ROLE_STAGES:
            raise exceptions.InvalidRoleStageException(stage, ROLE_STAGES)
        self.role_id = role_id
        self.title = title
        self.description = description
        self.stage = stage
        self.permissions = tuple(OrderedDict.fromkeys(permissions))

    def to_document(self):
        '''
        Returns an OrderedDict in the role definition file format.
        '''
        document = OrderedDict()
        document['title'] = self.title
        document['description'] = self.description
        document['stage'] = self.stage
        document['includedPermissions'] = list(self.permissions)
        return document

    def render(self):
        '''
        Renders the role definition file as YAML
        '''
        return helpers.ordered_yaml_dump(self.to_document(), width=120)

    def organization_role_name(self, organization_id):
        return 'organizations/%s/roles/%s' % (organization_id, self.role_id)

    def comparable_attributes(self):
        '''
        Returns the attributes that the server echoes back when describing
        the role, keyed the way `gcloud iam roles describe` keys them.
        '''
        return {'title': self.title,
                'description': self.description,
                'stage': self.stage,
                'includedPermissions': list(self.permissions)}

def build_finte_read_only_role():
    '''
    Returns a new RoleDefinition for FinteReadOnlyRole. It takes no input so
    the payload is the same for every organization and project.
    '''
    return RoleDefinition(role_id=FINTE_READ_ONLY_ROLE_ID,
                          title=FINTE_READ_ONLY_ROLE_TITLE,
                          description=FINTE_READ_ONLY_ROLE_DESCRIPTION,
                          permissions=FINTE_READ_ONLY_PERMISSIONS,
                          stage=DEFAULT_STAGE)
