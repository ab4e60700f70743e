import pytest

REPORT_CSV = (
    "Concepto,Tipo,Impacto,Liverpool,Suburbia,Logística\n"
    'Renta oficina,Gasto,ER,"(1,200.00)",300,0\n'
    'Venta mostrador,Ingreso,ER,0,"$ 5,000",0\n'
    "Total Gastos,,,100,100,100\n"
    "Suma parcial,Gasto,,1,1,1\n"
    ",Gasto,,10,0,0\n"
    "Sin descripción,Gasto,,10,0,0\n"
    "Ajuste cero,mmm,BG,0,0,0\n"
    "Nota de ajuste,,BG,0,0,0\n"
    "Nota de crédito,,BG,0,0,0\n"
    "Flete,,ER,0,0,750\n"
)


@pytest.fixture
def report_csv() -> str:
    return REPORT_CSV


@pytest.fixture
def report_bytes() -> bytes:
    # Spanish Excel exports arrive as Latin-1
    return REPORT_CSV.encode("latin-1")
