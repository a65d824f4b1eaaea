from .audit_logger import audit_log, audit_access
from .auth import generate_token, token_required
from .classification import classify, get_category_info
from .statistics import aggregate
from .validators import validate_reading
