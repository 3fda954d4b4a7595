from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from schedule_lessons.config import get_settings
from schedule_lessons.db.models import Base  # импорт моделей

# Alembic Config
config = context.config

# Включаем логирование
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Metadata для автогенерации
target_metadata = Base.metadata

# URL БД берется из настроек приложения (.env / окружение)
db_url = get_settings().DATABASE_URL
config.set_main_option("sqlalchemy.url", db_url)

# SQLite не умеет ALTER TABLE в полном объеме
render_as_batch = db_url.startswith("sqlite")


def run_migrations_offline():
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
