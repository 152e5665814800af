from datetime import date
from typing import Annotated, Optional

from pydantic import BeforeValidator

from personnel.core.dates import normalize_end_date

# End dates arrive as "", "9999-12-31" or a real date; open ends become None
OpenEndDate = Annotated[Optional[date], BeforeValidator(normalize_end_date)]
