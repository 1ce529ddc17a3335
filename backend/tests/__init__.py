# Force SQLModel table registration at test discovery time
# so every table exists before any test database is created
from langschool.models.booking import Booking  # noqa: F401
from langschool.models.review import Review  # noqa: F401
from langschool.models.tutorial import Tutorial  # noqa: F401
