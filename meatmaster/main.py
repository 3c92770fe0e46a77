from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meatmaster import __version__
from meatmaster.api.v1 import auth, company, customer, expense, invoice, ledger, payment, product, report, user
from meatmaster.common.error_handlers import register_error_handlers
from meatmaster.core.config import settings
from meatmaster.logger_config import setup_file_logging


def create_app() -> FastAPI:
    app = FastAPI(title="MeatMaster", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    if settings.LOG_TO_FILE:
        setup_file_logging()

    # Register API routers
    app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
    app.include_router(user.router, prefix="/api/v1/users", tags=["users"])
    app.include_router(product.router, prefix="/api/v1/products", tags=["products"])
    app.include_router(customer.router, prefix="/api/v1/customers", tags=["customers"])
    app.include_router(ledger.router, prefix="/api/v1/ledger", tags=["ledger"])
    app.include_router(invoice.router, prefix="/api/v1/invoices", tags=["invoices"])
    app.include_router(payment.router, prefix="/api/v1/payments", tags=["payments"])
    app.include_router(expense.router, prefix="/api/v1/expenses", tags=["expenses"])
    app.include_router(company.router, prefix="/api/v1/company", tags=["company"])
    app.include_router(report.router, prefix="/api/v1/reports", tags=["reports"])

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the MeatMaster APIs!", "version": __version__}

    return app


app = create_app()
