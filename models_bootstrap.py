# models_bootstrap.py
from leave import models as _leave_models
from employee import models as _employee_models
