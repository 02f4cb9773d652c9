# sigorta_api/api_ana.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .dosya_deposu import DosyaDeposu
from .hatalar import SigortaHatasi
from .veritabani import engine_olustur, session_factory

# Mevcut rotaların içe aktarılması
from .rotalar import musteriler, policeler, muhasebe, yukleme, raporlar, pano, yedekleme

# Loglama ayarları
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def _dogrulama_mesaji(exc: RequestValidationError) -> str:
    parcalar = []
    for hata in exc.errors():
        # "body" / "query" gibi konum önekleri mesajdan çıkarılır
        alan = ".".join(str(p) for p in hata.get("loc", ()) if p not in ("body", "query", "path"))
        mesaj = hata.get("msg", "Geçersiz değer")
        parcalar.append(f"{alan}: {mesaj}" if alan else mesaj)
    return "; ".join(parcalar) or "Geçersiz istek"


def hata_yakalayicilari_ekle(app: FastAPI) -> None:
    @app.exception_handler(SigortaHatasi)
    async def sigorta_hatasi_handler(request: Request, exc: SigortaHatasi):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.mesaj})

    @app.exception_handler(RequestValidationError)
    async def dogrulama_hatasi_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": _dogrulama_mesaji(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_hatasi_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def beklenmeyen_hata_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} işlenirken beklenmeyen hata: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Beklenmeyen bir hata oluştu"}
        )


def create_app(database_url: str = None, upload_dir: str = None, yedek_dir: str = None) -> FastAPI:
    database_url = database_url or config.DATABASE_URL
    upload_dir = upload_dir or config.UPLOAD_DIR
    yedek_dir = yedek_dir or config.YEDEK_DIR

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Veritabanı bağlantısı uygulama başlarken kurulur ve kapanırken serbest bırakılır.
        Tabloların oluşturulması ayrı bir script'in (create_tables.py / alembic) görevidir.
        """
        logger.info("API başlatılıyor...")
        os.makedirs(upload_dir, exist_ok=True)
        engine = engine_olustur(database_url)
        app.state.engine = engine
        app.state.SessionLocal = session_factory(engine)
        try:
            yield
        finally:
            engine.dispose()
            logger.info("API kapanıyor...")

    app = FastAPI(
        lifespan=lifespan,
        title="Sigorta Acentesi API",
        description="Müşteri, poliçe, muhasebe ve rapor işlemleri için RESTful API",
        version="1.0.0",
    )
    app.state.yedek_dir = yedek_dir
    app.state.dosya_deposu = DosyaDeposu(upload_dir, config.UPLOAD_URL_ONEKI, config.MAX_DOSYA_BOYUTU)

    # CORS ayarları
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    hata_yakalayicilari_ekle(app)

    # Router'ları (rotaları) uygulamaya dahil etme
    app.include_router(musteriler.router)
    app.include_router(policeler.router)
    app.include_router(muhasebe.router)
    app.include_router(yukleme.router)
    app.include_router(raporlar.router)
    app.include_router(pano.router)
    app.include_router(yedekleme.router)

    # Yüklenen dosyalar /uploads altından sunulur; klasör lifespan içinde oluşturulur
    app.mount(config.UPLOAD_URL_ONEKI, StaticFiles(directory=upload_dir, check_dir=False), name="uploads")

    @app.get("/")
    def read_root():
        return {"data": {"mesaj": "Sigorta Acentesi API'sine hoş geldiniz!"}}

    return app


app = create_app()
