from pdf_rag.clients import build_embedder, build_openai_client, build_vector_database
from pdf_rag.config import get_settings
from pdf_rag.ingest import initialize_vector_store
from pdf_rag.log import setup_logging


def main():
    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    print("Source file:", settings.file_name)
    print(f"Index: {settings.index_name} ({settings.vector_backend.value}), namespace: {settings.pdf_namespace}")

    database = build_vector_database(settings)
    embedder = build_embedder(settings, build_openai_client(settings))

    ingested = initialize_vector_store(settings, database=database, embedder=embedder)
    if ingested:
        print(f"Ingested {ingested} chunks")
    else:
        print("Namespace already populated (or document empty); nothing ingested")


if __name__ == "__main__":
    main()
