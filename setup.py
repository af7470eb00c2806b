from setuptools import setup, find_packages

setup(
   name="mongotext",
   version="0.1",
   description="MongoDB database and collection handles that take JSON text arguments",
   package_dir={"": "src"},
   packages=find_packages(where="src"),
   include_package_data=True,
   python_requires=">=3.9",
   install_requires=[
       "motor>=3.3",
       "pymongo>=4.5",
       "pydantic>=2.0",
   ],
   extras_require={
       "test": [
           "pytest>=7.0",
           "pytest-asyncio>=0.21",
       ],
   },
   entry_points={
       "console_scripts": [
           "mongotext=mongotext.cli:main",
       ],
   },
)
