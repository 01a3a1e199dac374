'''
Provides ProjectContext
'''

class ProjectContext(object):
    '''
    The project every gcloud call of a run is scoped to. Produced once the
    project has been resolved and passed explicitly to later steps instead
    of changing the active project in the user's gcloud configuration.
    '''
    def __init__(self, project_id, project_number=None, name=None):
        self.project_id = project_id
        self.project_number = project_number
        self.name = name

    @classmethod
    def from_describe_response(cls, project_id, describe_response):
        describe_response = describe_response or {}
        return cls(project_id=describe_response.get('projectId') or project_id,
                   project_number=describe_response.get('projectNumber'),
                   name=describe_response.get('name'))

    def __repr__(self):
        return 'ProjectContext(project_id=%r)' % self.project_id
