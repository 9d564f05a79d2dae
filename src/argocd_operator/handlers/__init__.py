"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import application  # noqa: F401
from . import applicationset  # noqa: F401
from . import cluster  # noqa: F401
from . import project  # noqa: F401
from . import provider_config  # noqa: F401
from . import repository  # noqa: F401
from . import token  # noqa: F401
