# portfolio_backend/app.py
from wsgiref.simple_server import make_server
from datetime import timedelta
import logging
import re
import sys

from werkzeug.middleware.shared_data import SharedDataMiddleware
from werkzeug.wrappers import Request

from portfolio_backend import config
from portfolio_backend.database.database import build_engine, build_session_factory
from portfolio_backend.database.db_init import initialize_db
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_skill_repository import SqlalchemySkillRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_portfolio_repository import SqlalchemyPortfolioRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_experience_repository import SqlalchemyExperienceRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_relation_repository import (
    SqlalchemyExperienceSkillRepository, SqlalchemyPortfolioSkillRepository
)
from portfolio_backend.services import experience_service, portfolio_service
from portfolio_backend.services.experience_service import ExperienceService
from portfolio_backend.services.identity_service import IdentityService
from portfolio_backend.services.image_service import ImageService
from portfolio_backend.services.portfolio_service import PortfolioService
from portfolio_backend.services.skill_service import SkillService
from portfolio_backend.services.token_service import TokenService
from portfolio_backend.services.schemas import ImageUpload, UpdateRequest
from portfolio_backend.services.exceptions import ServiceError, ValidationError
from portfolio_backend.utils.responses import (
    created_response, error_response, internal_server_error_response, not_found_response, success_response
)
from portfolio_backend.utils.serializers import with_image_urls

logger = logging.getLogger(__name__)

CORS_HEADERS = [
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"),
    ("Access-Control-Allow-Headers", "Content-Type, Authorization"),
]

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_form_value(request, name):
    return request.form.get(name, "").strip()

def get_skill_ids(request):
    return [skill_id.strip() for skill_id in request.form.getlist("skill_ids") if skill_id.strip()]

def get_image_upload(request):
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        return None
    return ImageUpload(filename=upload.filename, stream=upload.stream)

def get_int_query(request, name, default):
    value = request.args.get(name, str(default))
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} value")

def get_page_window(request):
    """page/limit 쿼리 파라미터를 offset/limit으로 바꿉니다."""
    page = get_int_query(request, "page", 1)
    limit = get_int_query(request, "limit", 10)
    if page < 1:
        raise ValidationError("Invalid page value")
    return (page - 1) * limit, limit

def authorize(request, services):
    return services['identity'].authorize(request.headers.get("Authorization"))

def base_url(request):
    return request.host_url.rstrip("/")

def handle_exception(e):
    if isinstance(e, ServiceError):
        logger.info("Request failed (%s): %s", e.kind.value, e.message)
        return error_response(e.kind, e.message)
    logger.error("Unhandled exception: %s", e, exc_info=True)
    return internal_server_error_response()

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def build_services(db_session, token_service, image_service):
    """요청마다 새 세션으로 Repositories -> Services 순서의 의존성을 만듭니다."""
    user_repo = SqlalchemyUserRepository(db_session)
    skill_repo = SqlalchemySkillRepository(db_session)
    portfolio_repo = SqlalchemyPortfolioRepository(db_session)
    experience_repo = SqlalchemyExperienceRepository(db_session)
    portfolio_skill_repo = SqlalchemyPortfolioSkillRepository(db_session)
    experience_skill_repo = SqlalchemyExperienceSkillRepository(db_session)

    return {
        'identity': IdentityService(user_repo, token_service, image_service),
        'skill': SkillService(skill_repo, image_service),
        'portfolio': PortfolioService(portfolio_repo, portfolio_skill_repo, experience_repo, image_service),
        'experience': ExperienceService(experience_repo, experience_skill_repo, image_service),
    }


def create_app(session_factory, token_service, image_service):
    """
    WSGI 애플리케이션을 만듭니다.

    DB 세션 팩토리, 토큰 서비스, 이미지 저장 서비스는 모두 인자로 전달받으며,
    업로드된 이미지는 '/uploads' 경로로 정적 제공됩니다.
    """
    routes = [
        ('POST', r'^/api/v1/auth/register$', register_handler),
        ('POST', r'^/api/v1/auth/login$', login_handler),
        ('GET', r'^/api/v1/user$', get_user_handler),
        ('DELETE', r'^/api/v1/user$', delete_user_handler),
        ('POST', r'^/api/v1/skills$', create_skill_handler),
        ('GET', r'^/api/v1/skills$', list_skills_handler),
        ('GET', r'^/api/v1/skills/([a-zA-Z0-9_-]+)$', get_skill_handler),
        ('PUT', r'^/api/v1/skills/([a-zA-Z0-9_-]+)$', update_skill_handler),
        ('DELETE', r'^/api/v1/skills/([a-zA-Z0-9_-]+)$', delete_skill_handler),
        ('POST', r'^/api/v1/portfolio$', create_portfolio_handler),
        ('GET', r'^/api/v1/portfolio$', list_portfolios_handler),
        ('GET', r'^/api/v1/portfolio/([a-zA-Z0-9_-]+)$', get_portfolio_handler),
        ('PUT', r'^/api/v1/portfolio/([a-zA-Z0-9_-]+)$', update_portfolio_handler),
        ('DELETE', r'^/api/v1/portfolio/([a-zA-Z0-9_-]+)$', delete_portfolio_handler),
        ('PUT', r'^/api/v1/portfolio-skill/([a-zA-Z0-9_-]+)$', add_portfolio_skills_handler),
        ('DELETE', r'^/api/v1/portfolio-skill/([a-zA-Z0-9_-]+)$', remove_portfolio_skill_handler),
        ('POST', r'^/api/v1/experience$', create_experience_handler),
        ('GET', r'^/api/v1/experience$', list_experiences_handler),
        ('GET', r'^/api/v1/experience/([a-zA-Z0-9_-]+)$', get_experience_handler),
        ('PUT', r'^/api/v1/experience/([a-zA-Z0-9_-]+)$', update_experience_handler),
        ('DELETE', r'^/api/v1/experience/([a-zA-Z0-9_-]+)$', delete_experience_handler),
        ('PUT', r'^/api/v1/experience-skill/([a-zA-Z0-9_-]+)$', add_experience_skills_handler),
        ('DELETE', r'^/api/v1/experience-skill/([a-zA-Z0-9_-]+)$', remove_experience_skill_handler),
    ]

    def application(environ, start_response):
        request = Request(environ)
        if request.method == "OPTIONS":
            start_response("200 OK", CORS_HEADERS)
            return [b""]

        db_session = session_factory()
        try:
            services = build_services(db_session, token_service, image_service)

            handler, path_args = None, []
            for route_method, pattern, route_handler in routes:
                if request.method == route_method and (match := re.match(pattern, request.path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(request, services, *path_args)
            else:
                status, response_body = not_found_response("Not Found")

        except Exception as e:
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        start_response(status, [("Content-Type", "application/json")] + CORS_HEADERS)
        return [response_body.encode("utf-8")]

    return SharedDataMiddleware(application, {"/uploads": image_service.upload_root})

# --------------------------------------------------------------------------
## 핸들러 함수: 인증 / 사용자
# --------------------------------------------------------------------------

def register_handler(request, services):
    user = services['identity'].register(
        name=get_form_value(request, "name"),
        email=get_form_value(request, "email"),
        password=request.form.get("password", ""),
        image=get_image_upload(request),
    )
    return created_response(with_image_urls("user", user, base_url(request)))

def login_handler(request, services):
    user = services['identity'].login(get_form_value(request, "email"), request.form.get("password", ""))
    return success_response(with_image_urls("user", user, base_url(request)))

def get_user_handler(request, services):
    user_id = authorize(request, services)
    user = services['identity'].get_user(user_id)
    return success_response(with_image_urls("user", user, base_url(request)))

def delete_user_handler(request, services):
    authorize(request, services)
    user_id = get_form_value(request, "user_id") or request.args.get("user_id", "").strip()
    services['identity'].delete_user(user_id)
    return success_response(message="User deleted successfully")

# --------------------------------------------------------------------------
## 핸들러 함수: 기술(Skill)
# --------------------------------------------------------------------------

def create_skill_handler(request, services):
    authorize(request, services)
    skill = services['skill'].create_skill(get_form_value(request, "name"), get_image_upload(request))
    return created_response(with_image_urls("skill", skill, base_url(request)))

def list_skills_handler(request, services):
    limit = get_int_query(request, "limit", 10)
    offset = get_int_query(request, "offset", 0)
    skills = services['skill'].list_skills(offset, limit)
    return success_response([with_image_urls("skill", s, base_url(request)) for s in skills])

def get_skill_handler(request, services, skill_id):
    skill = services['skill'].get_skill(skill_id)
    return success_response(with_image_urls("skill", skill, base_url(request)))

def update_skill_handler(request, services, skill_id):
    authorize(request, services)
    update = UpdateRequest.from_form(request.form, ("name",), image=get_image_upload(request))
    skill = services['skill'].update_skill(skill_id, update)
    return success_response(with_image_urls("skill", skill, base_url(request)), message="Skill updated successfully")

def delete_skill_handler(request, services, skill_id):
    authorize(request, services)
    services['skill'].delete_skill(skill_id)
    return success_response(message="Skill deleted successfully")

# --------------------------------------------------------------------------
## 핸들러 함수: 포트폴리오(Portfolio)
# --------------------------------------------------------------------------

def create_portfolio_handler(request, services):
    authorize(request, services)
    portfolio = services['portfolio'].create_portfolio(
        title=get_form_value(request, "title"),
        content=get_form_value(request, "content"),
        date_project=get_form_value(request, "date_project"),
        image=get_image_upload(request),
        skill_ids=get_skill_ids(request),
        subtitle=get_form_value(request, "subtitle"),
        status=get_form_value(request, "status"),
        experience_id=get_form_value(request, "experience_id"),
    )
    return created_response(with_image_urls("portfolio", portfolio, base_url(request)))

def list_portfolios_handler(request, services):
    offset, limit = get_page_window(request)
    portfolios = services['portfolio'].list_portfolios(offset, limit)
    return success_response({"portfolios": [with_image_urls("portfolio", p, base_url(request)) for p in portfolios]})

def get_portfolio_handler(request, services, portfolio_id):
    portfolio = services['portfolio'].get_portfolio(portfolio_id)
    return success_response(with_image_urls("portfolio", portfolio, base_url(request)))

def update_portfolio_handler(request, services, portfolio_id):
    authorize(request, services)
    update = UpdateRequest.from_form(request.form, portfolio_service.UPDATABLE_FIELDS, image=get_image_upload(request))
    portfolio = services['portfolio'].update_portfolio(portfolio_id, update)
    return success_response(with_image_urls("portfolio", portfolio, base_url(request)),
                            message="Portfolio updated successfully")

def delete_portfolio_handler(request, services, portfolio_id):
    authorize(request, services)
    services['portfolio'].delete_portfolio(portfolio_id)
    return success_response(message="Portfolio and its relations deleted successfully")

def add_portfolio_skills_handler(request, services, portfolio_id):
    authorize(request, services)
    services['portfolio'].add_skills(portfolio_id, get_skill_ids(request))
    return success_response(message="Skills successfully added to portfolio")

def remove_portfolio_skill_handler(request, services, portfolio_id):
    authorize(request, services)
    skill_id = get_form_value(request, "skill_id") or request.args.get("skill_id", "").strip()
    services['portfolio'].remove_skill(portfolio_id, skill_id)
    return success_response(message="Skill successfully deleted from portfolio")

# --------------------------------------------------------------------------
## 핸들러 함수: 경력(Experience)
# --------------------------------------------------------------------------

def create_experience_handler(request, services):
    authorize(request, services)
    experience = services['experience'].create_experience(
        company_name=get_form_value(request, "company_name"),
        position=get_form_value(request, "position"),
        start_date=get_form_value(request, "start_date"),
        end_date=get_form_value(request, "end_date"),
        image=get_image_upload(request),
        skill_ids=get_skill_ids(request),
        location=get_form_value(request, "location"),
    )
    return created_response(with_image_urls("experience", experience, base_url(request)))

def list_experiences_handler(request, services):
    offset, limit = get_page_window(request)
    experiences = services['experience'].list_experiences(offset, limit)
    return success_response({"experience": [with_image_urls("experience", e, base_url(request)) for e in experiences]})

def get_experience_handler(request, services, experience_id):
    experience = services['experience'].get_experience(experience_id)
    return success_response(with_image_urls("experience", experience, base_url(request)))

def update_experience_handler(request, services, experience_id):
    authorize(request, services)
    update = UpdateRequest.from_form(request.form, experience_service.UPDATABLE_FIELDS, image=get_image_upload(request))
    experience = services['experience'].update_experience(experience_id, update)
    return success_response(with_image_urls("experience", experience, base_url(request)),
                            message="Experience updated successfully")

def delete_experience_handler(request, services, experience_id):
    authorize(request, services)
    services['experience'].delete_experience(experience_id)
    return success_response(message="Experience and its relations deleted successfully")

def add_experience_skills_handler(request, services, experience_id):
    authorize(request, services)
    services['experience'].add_skills(experience_id, get_skill_ids(request))
    return success_response(message="Skills successfully added to experience")

def remove_experience_skill_handler(request, services, experience_id):
    authorize(request, services)
    skill_id = get_form_value(request, "skill_id") or request.args.get("skill_id", "").strip()
    services['experience'].remove_skill(experience_id, skill_id)
    return success_response(message="Skill successfully deleted from experience")

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    try:
        engine = build_engine(config.DATABASE_URL)
        initialize_db(engine)
        app = create_app(
            build_session_factory(engine),
            TokenService(config.JWT_SECRET, config.JWT_ALGORITHM, timedelta(hours=config.TOKEN_EXPIRE_HOURS)),
            ImageService(config.UPLOAD_DIR),
        )
        with make_server(config.HOST, config.PORT, app) as httpd:
            logger.info("Serving portfolio backend on port %d...", config.PORT)
            httpd.serve_forever()
    except Exception as e:
        logger.critical("Error starting server: %s", e)
        sys.exit(1)
