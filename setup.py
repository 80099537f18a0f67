# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="boxdu",
    version="0.1.0",
    description="Convierte listados de Box Backup en exportaciones de ncdu por estado de fichero",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["boxdu", "boxdu.*"]),
    python_requires=">=3.8",
    install_requires=[
        "tqdm",  # Barra de progreso durante la lectura del listado
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'boxdu=boxdu.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
    ],
)
