import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from interview_booking.core import config
from interview_booking.database import Base, SessionLocal, engine, ensure_schema
from interview_booking.models import availability, booking, interview_type, interviewer, invite, verification_code  # noqa: F401
from interview_booking.routes import auth_routes, slot_routes, student_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Interview Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = 'Invalid request'
    if errors:
        first = errors[0]
        field = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
        message = f"{field}: {first['msg']}" if field else first['msg']
    logger.info('Rejected request to %s: %s', request.url.path, message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'detail': message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


@app.get('/')
def root():
    return {'status': 'Interview Booking API Running'}


@app.get('/health')
def health():
    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
    except SQLAlchemyError:
        logger.exception('Health check could not reach the database')
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={'status': 'error', 'database': 'disconnected'},
        )
    return {'status': 'ok', 'database': 'connected'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(student_routes.router, prefix='/student')
app.include_router(slot_routes.router, prefix='/slots')


if __name__ == '__main__':
    uvicorn.run(app, host='0.0.0.0', port=config.PORT)
