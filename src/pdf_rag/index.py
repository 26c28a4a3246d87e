from .config import Cloud, Metric
from .errors import ConfigurationError, ProviderError
from .log import get_logger

logger = get_logger("index")


def get_or_create_index(
    database,
    name: str,
    dimension: int,
    metric: Metric | str = Metric.COSINE,
    cloud: Cloud | str = Cloud.AWS,
    region: str = "us-east-1",
):
    """
    Make sure an index called `name` exists and return a handle to it.

    An existing index is reused as-is: its dimension and metric are not
    compared with the requested ones. A missing index is created with the
    requested parameters, which may provision billable infrastructure.

    Raises ConfigurationError for invalid parameters and ProviderError when
    listing or creating indexes fails.
    """
    if not name or not name.strip():
        raise ConfigurationError("Index name must be non-empty", setting="index_name")
    if dimension <= 0:
        raise ConfigurationError("Index dimension must be positive", setting="embedding_dimension")
    try:
        metric = Metric(metric)
        cloud = Cloud(cloud)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    try:
        existing = database.list_index_names()
        if name in existing:
            logger.info(f'Index "{name}" already exists.')
        else:
            logger.info(
                f'Creating index "{name}": dimension={dimension}, metric={metric.value}, '
                f"cloud={cloud.value}, region={region}"
            )
            database.create_index(
                name=name,
                dimension=dimension,
                metric=metric,
                cloud=cloud,
                region=region,
            )
        return database.index(name)
    except Exception as e:
        logger.error(f'Error creating or retrieving index "{name}": {e}')
        raise ProviderError(
            f'Could not get or create index "{name}": {e}',
            operation="get_or_create_index",
            details={"index": name},
        ) from e
