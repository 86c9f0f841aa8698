# Nombre de archivo: __init__.py
# Ubicación de archivo: shared_nlp/__init__.py
# Descripción: Paquete del servicio NLP compartido
