"""
App composition: services exposed via ServiceModule and app.register().
To run: uvicorn main:app --reload   (or: postwire serve main:app)
Then POST http://localhost:8000/api/orders/create with {"order_id": "1", "customer_id": "c", "total_cents": 100}.
"""
import sys
from pathlib import Path

# example lives in examples/orders
sys.path.insert(0, str(Path(__file__).resolve().parent))

from postwire import Application, ServiceModule, Settings, setup_logging
from service import OrdersService

settings = Settings.from_env()
setup_logging(settings.log_level, settings.log_config)

app = Application(settings)
app.register(ServiceModule(OrdersService))
app.openapi(title="Orders API", version="0.1.0")

if __name__ == "__main__":
    app.run()
