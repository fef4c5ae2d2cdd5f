from setuptools import setup, find_packages

setup(
    name="editorialdesk",
    version="0.1.0",
    packages=find_packages(include=[
        "editorialdesk", "editorialdesk.*",
        "gateway", "gateway.*",
        "newsdesk", "newsdesk.*",
    ]),
    include_package_data=True,
    install_requires=[
        "Django>=4.2",
        "djangorestframework>=3.14",
        "django-cors-headers>=4.0",
        "python-dotenv>=1.0",
        "requests>=2.31",
        "Markdown>=3.5",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-django>=4.7",
        ],
    },
    author="Dork Editorial",
    description="Editorial workflow backend: WordPress gateway functions, article generators and newsdesk API.",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "Framework :: Django",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: MIT License"
    ],
    python_requires=">=3.9",
)
