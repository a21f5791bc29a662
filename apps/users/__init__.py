"""Users app package.

Custom user model (email login) and the travel teams users belong to.
Every quote, inventory lookup and booking is scoped to the caller's team
through ``apps.users.scope.TeamScope``. Use ``apps.users.models.CustomUser``
as the AUTH_USER_MODEL throughout the project.
"""
